"""
Session management module.

Parses session tokens and stores the messaging library's credentials.
"""
from .protocols import CredentialStore
from .token import SessionToken, DEFAULT_MARKER
from .file_store import FileCredentialStore, CREDS_FILENAME

__all__ = [
    'CredentialStore',
    'SessionToken',
    'DEFAULT_MARKER',
    'FileCredentialStore',
    'CREDS_FILENAME',
]
