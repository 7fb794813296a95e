"""
File decryption for MEGA public links.

A public link key is 32 bytes: the AES key XOR-folded with the nonce and
condensed MAC. Content is AES-128-CTR; integrity is a chained CBC-MAC
computed per chunk.
"""
import json
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from Crypto.Cipher import AES
from Crypto.Util import Counter

CHUNK_UNIT = 0x20000  # 128 KiB
MAX_CHUNK_UNITS = 8   # chunks stop growing at 1 MiB


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


@dataclass(frozen=True)
class FileKey:
    """
    Unpacked 32-byte link key.
    
    Attributes:
        aes_key: 16-byte AES key (key[0:16] XOR key[16:32])
        nonce: 8-byte CTR nonce (key[16:24])
        meta_mac: 8-byte condensed MAC (key[24:32])
    """
    aes_key: bytes
    nonce: bytes
    meta_mac: bytes

    @classmethod
    def from_link_key(cls, key: bytes) -> 'FileKey':
        """Unmerge a link key into its AES key, nonce and MAC."""
        if len(key) != 32:
            raise ValueError(f"File key must be 32 bytes, got {len(key)}")
        return cls(
            aes_key=_xor(key[:16], key[16:32]),
            nonce=key[16:24],
            meta_mac=key[24:32],
        )

    def to_link_key(self) -> bytes:
        """Merge back into the 32-byte form used in links."""
        folded = self.nonce + self.meta_mac
        return _xor(self.aes_key, folded) + folded


def chunk_bounds(size: int) -> Iterator[Tuple[int, int]]:
    """
    Yield ``(start, end)`` offsets of MEGA MAC chunks.
    
    Chunks are 128 KiB, 256 KiB, ... up to 1 MiB, then 1 MiB each.
    """
    start = 0
    index = 1
    while start < size:
        end = min(start + min(index, MAX_CHUNK_UNITS) * CHUNK_UNIT, size)
        yield start, end
        start = end
        index += 1


class MegaDecrypt:
    """
    Decrypts a whole file and verifies its MEGA MAC.
    """
    
    def __init__(self, key: FileKey):
        self.key = key
        ctr_counter = Counter.new(
            64,
            prefix=key.nonce,
            initial_value=0,
            allow_wraparound=False
        )
        self.ctr = AES.new(key.aes_key, AES.MODE_CTR, counter=ctr_counter)
    
    def decrypt(self, data: bytes) -> bytes:
        """Decrypt the complete ciphertext."""
        return self.ctr.decrypt(data)
    
    def condensed_mac(self, plaintext: bytes) -> bytes:
        """Compute the 8-byte condensed MAC of ``plaintext``."""
        iv = self.key.nonce + self.key.nonce
        ecb = AES.new(self.key.aes_key, AES.MODE_ECB)
        file_mac = bytes(16)
        
        for start, end in chunk_bounds(len(plaintext)):
            chunk = plaintext[start:end]
            remainder = len(chunk) % 16
            if remainder:
                chunk += bytes(16 - remainder)
            cbc = AES.new(self.key.aes_key, AES.MODE_CBC, iv=iv)
            chunk_mac = cbc.encrypt(chunk)[-16:]
            file_mac = ecb.encrypt(_xor(file_mac, chunk_mac))
        
        return _xor(file_mac[:4], file_mac[4:8]) + _xor(file_mac[8:12], file_mac[12:16])
    
    def verify(self, plaintext: bytes) -> bool:
        """Check ``plaintext`` against the MAC embedded in the key."""
        return self.condensed_mac(plaintext) == self.key.meta_mac


class MegaEncrypt:
    """
    Encrypts a buffer the way MEGA clients upload it.
    
    Produces the 32-byte link key for the given AES key and nonce.
    """
    
    def __init__(self, aes_key: bytes, nonce: bytes):
        if len(aes_key) != 16 or len(nonce) != 8:
            raise ValueError("Need a 16-byte AES key and an 8-byte nonce")
        self.aes_key = aes_key
        self.nonce = nonce
    
    def encrypt(self, plaintext: bytes) -> Tuple[bytes, bytes]:
        """Return ``(ciphertext, link_key)``."""
        provisional = FileKey(self.aes_key, self.nonce, bytes(8))
        mac = MegaDecrypt(provisional).condensed_mac(plaintext)
        key = FileKey(self.aes_key, self.nonce, mac)
        ciphertext = MegaDecrypt(key).decrypt(plaintext)
        return ciphertext, key.to_link_key()


def decrypt_attributes(data: bytes, key: FileKey) -> Optional[dict]:
    """
    Decrypt a node attribute block (``MEGA{...json...}``).
    
    Returns:
        The attribute dict, or None if the block does not decrypt cleanly
    """
    if not data or len(data) % 16:
        return None
    cipher = AES.new(key.aes_key, AES.MODE_CBC, iv=bytes(16))
    plain = cipher.decrypt(data).rstrip(b'\0')
    if not plain.startswith(b'MEGA'):
        return None
    try:
        return json.loads(plain[4:].decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


def encrypt_attributes(attributes: dict, key: FileKey) -> bytes:
    """Encrypt an attribute dict into a ``MEGA{...}`` block."""
    plain = b'MEGA' + json.dumps(attributes).encode('utf-8')
    remainder = len(plain) % 16
    if remainder:
        plain += bytes(16 - remainder)
    cipher = AES.new(key.aes_key, AES.MODE_CBC, iv=bytes(16))
    return cipher.encrypt(plain)
