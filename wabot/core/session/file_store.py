"""
File-based credential store.

Owns ``<session_dir>/creds.json``, the file the messaging library reads
its authentication state from.
"""
import json
import shutil
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import aiofiles

from ..exceptions import FilesystemError
from ..logging import get_logger

CREDS_FILENAME = 'creds.json'


class FileCredentialStore:
    """
    Credential store backed by a session directory.
    
    Example:
        >>> store = FileCredentialStore('session')
        >>> store.creds_path
        PosixPath('session/creds.json')
    """
    
    def __init__(self, session_dir: Union[str, Path] = 'session'):
        self._session_dir = Path(session_dir)
        self._logger = get_logger('session')
    
    @property
    def session_dir(self) -> Path:
        """Directory holding all authentication state files."""
        return self._session_dir
    
    @property
    def creds_path(self) -> Path:
        """Path of the main credential file."""
        return self._session_dir / CREDS_FILENAME
    
    def exists(self) -> bool:
        return self.creds_path.is_file()
    
    def ensure_dir(self) -> Path:
        """Create the session directory (and parents) if absent."""
        try:
            self._session_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                f"Cannot create session directory {self._session_dir}: {e}",
                path=str(self._session_dir)
            ) from e
        return self._session_dir
    
    async def write_bytes(self, data: bytes) -> None:
        """
        Write ``data`` verbatim to the credential file.
        
        Raises:
            FilesystemError: If the file cannot be written
        """
        self.ensure_dir()
        try:
            async with aiofiles.open(self.creds_path, 'wb') as f:
                await f.write(data)
        except OSError as e:
            raise FilesystemError(
                f"Cannot write {self.creds_path}: {e}",
                path=str(self.creds_path)
            ) from e
        self._logger.debug(f"Wrote {len(data)} bytes to {self.creds_path}")
    
    async def read_bytes(self) -> Optional[bytes]:
        """Read the credential file, or None if it does not exist."""
        if not self.exists():
            return None
        try:
            async with aiofiles.open(self.creds_path, 'rb') as f:
                return await f.read()
        except OSError as e:
            raise FilesystemError(
                f"Cannot read {self.creds_path}: {e}",
                path=str(self.creds_path)
            ) from e
    
    async def load_creds(self) -> Dict[str, Any]:
        """Stored credentials, or an empty dict if absent or unreadable JSON."""
        data = await self.read_bytes()
        if not data:
            return {}
        try:
            creds = json.loads(data)
        except ValueError:
            self._logger.warning(f"{self.creds_path} is not valid JSON, replacing it")
            return {}
        return creds if isinstance(creds, dict) else {}
    
    async def save_creds(self, creds: Mapping[str, Any]) -> None:
        """
        Merge a ``creds.update`` payload into the credential file.
    
        Updates may carry only the changed keys, so keys already stored
        are kept unless the update replaces them.
        """
        merged = await self.load_creds()
        merged.update(creds)
        payload = json.dumps(merged, indent=2, default=str)
        await self.write_bytes(payload.encode('utf-8'))
    
    def remove_creds(self) -> None:
        """
        Delete the credential file, keeping the session directory.
    
        Raises:
            FilesystemError: If the file exists but cannot be removed
        """
        try:
            self.creds_path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise FilesystemError(
                f"Cannot delete {self.creds_path}: {e}",
                path=str(self.creds_path)
            ) from e
        self._logger.info(f"Deleted {self.creds_path}")
    
    def delete(self) -> None:
        """Remove the whole session directory."""
        if not self._session_dir.exists():
            return
        try:
            shutil.rmtree(self._session_dir)
        except OSError as e:
            raise FilesystemError(
                f"Cannot delete {self._session_dir}: {e}",
                path=str(self._session_dir)
            ) from e
        self._logger.info(f"Deleted session directory {self._session_dir}")
