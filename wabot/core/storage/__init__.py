"""Remote storage for the bootstrap credential blob."""
from .remote_file import RemoteFile, RemoteFileInfo, DEFAULT_STORAGE_HOST

__all__ = [
    'RemoteFile',
    'RemoteFileInfo',
    'DEFAULT_STORAGE_HOST',
]
