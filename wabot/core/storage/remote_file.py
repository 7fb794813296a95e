"""
Public MEGA file reference.

A RemoteFile is built from a ``(file_id, key)`` pair or a
``https://mega.nz/file/<id>#<key>`` link and downloads, decrypts and
verifies the file's bytes.
"""
import re
import binascii
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from ..api import AsyncAPIClient, APIConfig
from ..crypto import Base64Encoder, FileKey, MegaDecrypt, decrypt_attributes
from ..exceptions import FormatError, RemoteFetchError
from ..logging import get_logger

logger = get_logger('storage')

DEFAULT_STORAGE_HOST = 'mega.nz'

_FILE_PATH = re.compile(r'^/file/([^#/?]+)/?$')


@dataclass
class RemoteFileInfo:
    """Metadata returned by the MEGA API for a public file."""
    handle: str
    size: int
    name: Optional[str]
    download_url: str


class RemoteFile:
    """
    Reference to a file shared through a public MEGA link.
    
    Example:
        >>> remote = RemoteFile.from_parts('abc123', 'deadbeef')
        >>> remote.url
        'https://mega.nz/file/abc123#deadbeef'
        >>> data = await remote.download()
    """
    
    def __init__(
        self,
        file_id: str,
        key: str,
        host: str = DEFAULT_STORAGE_HOST,
        api_config: Optional[APIConfig] = None,
        api: Optional[AsyncAPIClient] = None
    ):
        """
        Initialize the reference. No network traffic happens here.
        
        Args:
            file_id: Public file handle
            key: URL-safe base64 link key
            host: Storage host used to build the link
            api_config: Configuration for the MEGA API client
            api: Pre-built API client (its lifecycle stays with the caller)
        """
        if not file_id or not key:
            raise FormatError("A MEGA file reference needs both a file id and a key")
        self.file_id = file_id
        self.key = key
        self.host = host
        self._api_config = api_config
        self._api = api
        self.info: Optional[RemoteFileInfo] = None
    
    @classmethod
    def from_parts(cls, file_id: str, key: str, host: str = DEFAULT_STORAGE_HOST, **kwargs) -> 'RemoteFile':
        """Build a reference from a file id and its decryption key."""
        return cls(file_id, key, host=host, **kwargs)
    
    @classmethod
    def from_url(cls, url: str, **kwargs) -> 'RemoteFile':
        """
        Build a reference from a ``https://<host>/file/<id>#<key>`` link.
        
        Raises:
            FormatError: If the link has no file handle or no key
        """
        parsed = urlparse(url)
        match = _FILE_PATH.match(parsed.path)
        if not parsed.netloc or not match:
            raise FormatError(f"Invalid MEGA file link: {url}")
        if not parsed.fragment:
            raise FormatError(f"Missing key in MEGA file link: {url}")
        return cls(match.group(1), parsed.fragment, host=parsed.netloc, **kwargs)
    
    @property
    def url(self) -> str:
        """Public link of the file."""
        return f"https://{self.host}/file/{self.file_id}#{self.key}"
    
    def __repr__(self) -> str:
        return f"RemoteFile(file_id={self.file_id!r}, host={self.host!r})"
    
    def file_key(self) -> FileKey:
        """
        Decode the link key.
        
        Raises:
            RemoteFetchError: If the key is not 32 bytes of URL-safe base64
        """
        try:
            raw = Base64Encoder.decode(self.key)
            return FileKey.from_link_key(raw)
        except (binascii.Error, ValueError) as e:
            raise RemoteFetchError(f"Invalid decryption key for {self.file_id}", cause=e) from e
    
    async def download(self) -> bytes:
        """
        Download and decrypt the complete file.
        
        Returns:
            Plaintext file content
            
        Raises:
            RemoteFetchError: On transport failure, MEGA API error, bad key
                or MAC mismatch
        """
        key = self.file_key()
        
        if self._api is not None:
            return await self._download_with(self._api, key)
        
        async with AsyncAPIClient(self._api_config) as api:
            return await self._download_with(api, key)
    
    async def _download_with(self, api: AsyncAPIClient, key: FileKey) -> bytes:
        result = await api.get_public_file(self.file_id)
        self.info = RemoteFileInfo(
            handle=self.file_id,
            size=int(result.get('s', 0)),
            name=self._decode_name(result.get('at'), key),
            download_url=result['g'],
        )
        logger.debug(f"Resolved {self.file_id}: {self.info.name} ({self.info.size} bytes)")
        
        encrypted = await api.download(self.info.download_url)
        if self.info.size and len(encrypted) != self.info.size:
            raise RemoteFetchError(
                f"Truncated download for {self.file_id}: "
                f"got {len(encrypted)} of {self.info.size} bytes"
            )
        
        decryptor = MegaDecrypt(key)
        plaintext = decryptor.decrypt(encrypted)
        if not decryptor.verify(plaintext):
            raise RemoteFetchError(f"MAC mismatch for {self.file_id}, wrong key or corrupted file")
        return plaintext
    
    @staticmethod
    def _decode_name(attributes: Optional[str], key: FileKey) -> Optional[str]:
        if not attributes:
            return None
        try:
            decoded = decrypt_attributes(Base64Encoder.decode(attributes), key)
        except (binascii.Error, ValueError):
            return None
        return decoded.get('n') if decoded else None
