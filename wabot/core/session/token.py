"""
Session token parsing.

A session token is ``<marker><fileId>#<decryptionKey>``, where the pair
points at the credential blob stored on MEGA.
"""
from dataclasses import dataclass
from typing import Optional

from ..exceptions import ConfigurationError, FormatError

DEFAULT_MARKER = 'ASK-XMD~;;;'


@dataclass(frozen=True)
class SessionToken:
    """
    Parsed session token.
    
    Attributes:
        file_id: Remote storage file identifier
        decryption_key: Key that decrypts the remote file
    """
    file_id: str
    decryption_key: str

    @classmethod
    def parse(cls, value: Optional[str], marker: str = DEFAULT_MARKER) -> 'SessionToken':
        """
        Split a raw token into its file id and decryption key.
        
        The payload is the text between the first marker and the next
        one (if any). It must hold exactly one ``#`` with text on both
        sides.
        
        Raises:
            ConfigurationError: If the token is absent or empty
            FormatError: If the marker or the separator is missing
        """
        if not value or not value.strip():
            raise ConfigurationError("no session identifier provided")
        
        parts = value.strip().split(marker)
        if len(parts) < 2:
            raise FormatError("malformed session identifier: marker not found")
        
        payload = parts[1]
        if payload.count('#') != 1:
            raise FormatError(
                "malformed session identifier: expected '<fileId>#<decryptionKey>'"
            )
        
        file_id, decryption_key = payload.split('#')
        if not file_id or not decryption_key:
            raise FormatError("malformed session identifier: empty file id or key")
        
        return cls(file_id=file_id, decryption_key=decryption_key)

    def __repr__(self) -> str:
        # Keep the key out of logs
        return f"SessionToken(file_id={self.file_id!r}, decryption_key='***')"
