"""
Session bootstrapper.

Makes sure the messaging library finds authentication state on disk
before the socket is opened: either the credential file already exists,
or it is downloaded from the MEGA file named by the session token.
"""
import asyncio
from typing import Callable, Optional

from .core.exceptions import (
    ConfigurationError,
    FilesystemError,
    FormatError,
    RemoteFetchError,
)
from .core.logging import get_logger
from .core.session import CredentialStore, FileCredentialStore, SessionToken
from .core.settings import Settings
from .core.storage import RemoteFile

logger = get_logger('bootstrap')

RemoteFactory = Callable[..., RemoteFile]


class SessionBootstrapper:
    """
    Restores or downloads the bot's credential file.
    
    Example:
        >>> bootstrapper = SessionBootstrapper(Settings.from_env())
        >>> authenticated = await bootstrapper.initialize()
    """
    
    def __init__(
        self,
        settings: Settings,
        store: Optional[CredentialStore] = None,
        remote_factory: Optional[RemoteFactory] = None
    ):
        """
        Args:
            settings: Application settings (token, marker, host, timeout)
            store: Credential store; defaults to ``settings.session_dir``
            remote_factory: Builds the remote file reference from
                ``(file_id, key, host=..., api_config=...)``
        """
        self.settings = settings
        self.store = store or FileCredentialStore(settings.session_dir)
        self._remote_factory = remote_factory or RemoteFile.from_parts
    
    def parse_token(self) -> SessionToken:
        """Parse the configured session token."""
        return SessionToken.parse(self.settings.session_id, self.settings.session_marker)
    
    def remote_file(self, token: SessionToken) -> RemoteFile:
        """Build the remote reference for ``token``."""
        return self._remote_factory(
            token.file_id,
            token.decryption_key,
            host=self.settings.storage_host,
            api_config=self.settings.api_config(),
        )
    
    async def acquire_credentials(self) -> bytes:
        """
        Download the credential blob named by the session token.
        
        Returns:
            Raw credential bytes
        
        Raises:
            ConfigurationError: If no session token is configured
            FormatError: If the token is malformed (no network call is made)
            RemoteFetchError: If the download fails or outlives
                ``download_timeout``
        """
        token = self.parse_token()
        remote = self.remote_file(token)
        
        timeout = self.settings.download_timeout
        logger.info("Downloading session...")
        try:
            return await asyncio.wait_for(remote.download(), timeout)
        except RemoteFetchError:
            raise
        except asyncio.TimeoutError as e:
            raise RemoteFetchError(
                f"Session download did not finish within {timeout:g}s", cause=e
            ) from e
        except Exception as e:
            raise RemoteFetchError(f"Failed to download session data: {e!r}", cause=e) from e
    
    async def initialize(self) -> bool:
        """
        Ensure credentials are available locally.
        
        Never raises: every failure is logged and reported as False, which
        means the socket will fall back to QR pairing.
        
        Returns:
            True if a credential file is present afterwards
        """
        try:
            if isinstance(self.store, FileCredentialStore):
                self.store.ensure_dir()
            
            if self.store.exists():
                logger.info("Session file found, proceeding without QR code.")
                return True
            
            data = await self.acquire_credentials()
            await self.store.write_bytes(data)
        except ConfigurationError as e:
            logger.error(f"Please add your session to SESSION_ID: {e}")
        except FormatError as e:
            logger.error(
                f"Invalid SESSION_ID format, it must contain both file ID "
                f"and decryption key: {e}"
            )
        except RemoteFetchError as e:
            logger.error(f"Failed to download session data: {e}")
        except FilesystemError as e:
            logger.error(f"Failed to store session data: {e}")
        else:
            logger.info("Session downloaded, starting bot.")
            return True
        
        logger.warning("No session found or downloaded, QR code will be printed for authentication.")
        return False
