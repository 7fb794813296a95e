"""
Credential storage protocols.

The bootstrapper only needs to know whether credentials exist and how to
persist a downloaded blob.
"""
from typing import Protocol, Mapping, Any, runtime_checkable


@runtime_checkable
class CredentialStore(Protocol):
    """
    Protocol for credential storage implementations.
    """
    
    def exists(self) -> bool:
        """
        Check if credentials exist in storage.
        
        Returns:
            True if the credential file exists
        """
        ...
    
    async def write_bytes(self, data: bytes) -> None:
        """
        Persist a downloaded credential blob, replacing any previous one.
        
        Args:
            data: Raw credential bytes
        """
        ...
    
    async def save_creds(self, creds: Mapping[str, Any]) -> None:
        """
        Persist credentials handed over by the messaging library.
        """
        ...
    
    def delete(self) -> None:
        """
        Delete stored credentials.
        """
        ...
