"""Pytest fixtures for wabot tests."""
import logging
from typing import Any, Dict, List

import pytest
from Crypto.Random import get_random_bytes

from wabot.core.crypto import Base64Encoder, MegaEncrypt
from wabot.core.events import EventEmitter
from wabot.core.settings import ReconnectConfig, Settings


@pytest.fixture
def aes_key():
    """Generates a 16-byte AES key for testing."""
    return get_random_bytes(16)


@pytest.fixture
def nonce():
    """Generates an 8-byte CTR nonce."""
    return get_random_bytes(8)


@pytest.fixture
def encrypted_blob(aes_key, nonce):
    """Returns (plaintext, ciphertext, url-safe link key) for a creds file."""
    plaintext = b'{"noiseKey": {"private": "abc", "public": "def"}, "registered": true}'
    ciphertext, link_key = MegaEncrypt(aes_key, nonce).encrypt(plaintext)
    return plaintext, ciphertext, Base64Encoder.encode(link_key)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temporary session directory."""
    return Settings(
        session_id="ASK-XMD~;;;abc123#deadbeef",
        session_dir=tmp_path / "session",
        reconnect=ReconnectConfig(max_attempts=3, base_delay=0.5, max_delay=4.0),
    )


class FakeSocket:
    """In-memory stand-in for the messaging library's socket."""
    
    def __init__(self, user_id: str = "1234@s.whatsapp.net"):
        self.ev = EventEmitter('tests.socket')
        self.user = {'id': user_id}
        self.sent: List[tuple] = []
        self.ended = False
        self.fail_send = False
    
    async def send_message(self, jid: str, content: Dict[str, Any]) -> Dict[str, Any]:
        if self.fail_send:
            raise RuntimeError("send failed")
        self.sent.append((jid, content))
        return {'key': {'id': 'msg-1'}}
    
    async def end(self) -> None:
        self.ended = True


class FakeSocketFactory:
    """Socket factory recording every call."""
    
    def __init__(self, failures: int = 0):
        self.calls: List[Dict[str, Any]] = []
        self.sockets: List[FakeSocket] = []
        self.failures = failures
    
    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.failures:
            self.failures -= 1
            raise ConnectionError("cannot reach WhatsApp")
        socket = FakeSocket()
        self.sockets.append(socket)
        return socket


@pytest.fixture
def socket_factory():
    return FakeSocketFactory()


@pytest.fixture
def make_socket_factory():
    """Builds factories that fail a given number of times first."""
    return FakeSocketFactory


@pytest.fixture
def fake_socket():
    return FakeSocket()


@pytest.fixture(autouse=True)
def reset_wabot_logger():
    """Undo handler changes made by configure_logging between tests."""
    yield
    logger = logging.getLogger('wabot')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
