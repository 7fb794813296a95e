"""
Custom exceptions for wabot.

Every error raised while bootstrapping the session or supervising the
socket derives from WabotException.
"""
from typing import Optional


class WabotException(Exception):
    """Base exception for all wabot errors."""
    
    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(WabotException):
    """Raised when a required setting is missing or has an invalid value."""
    pass


class FormatError(WabotException):
    """Raised when a session identifier or storage link is malformed."""
    pass


class RemoteFetchError(WabotException):
    """Exception raised when the credential blob cannot be downloaded."""
    
    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        error_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            cause: Underlying transport or storage error
            error_code: MEGA API error code (if available)
        """
        self.cause = cause
        super().__init__(message, error_code)


class FilesystemError(WabotException):
    """Exception raised when the credential file cannot be written or read."""
    
    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(message)


class SocketError(WabotException):
    """Raised when the messaging socket cannot be constructed."""
    pass
