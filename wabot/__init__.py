"""
wabot - WhatsApp automation bot bootstrapper.

Usage:
    >>> from wabot import Settings, SessionBootstrapper
    >>> 
    >>> settings = Settings.from_env()
    >>> authenticated = await SessionBootstrapper(settings).initialize()
"""
import logging

from .bootstrap import SessionBootstrapper
from .context import AppContext
from .core.settings import Settings, ReconnectConfig
from .core.session import SessionToken, FileCredentialStore
from .core.storage import RemoteFile
from .core.connection import ConnectionSupervisor, DisconnectReason
from .core.exceptions import (
    WabotException,
    ConfigurationError,
    FormatError,
    RemoteFetchError,
    FilesystemError,
    SocketError,
)
from .core.logging import get_logger, configure_logging

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for wabot modules.
    
    Sets the level on the ``wabot`` logger and keeps propagation to the
    root logger, so ``logging.basicConfig`` output includes wabot records.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    logger = logging.getLogger('wabot')
    logger.setLevel(level)
    logger.propagate = True


__all__ = [
    'SessionBootstrapper',
    'AppContext',
    'Settings',
    'ReconnectConfig',
    'SessionToken',
    'FileCredentialStore',
    'RemoteFile',
    'ConnectionSupervisor',
    'DisconnectReason',
    'WabotException',
    'ConfigurationError',
    'FormatError',
    'RemoteFetchError',
    'FilesystemError',
    'SocketError',
    'get_logger',
    'configure_logging',
    'setup_logging',
]
