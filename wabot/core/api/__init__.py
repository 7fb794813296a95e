"""MEGA API module."""
from .client import AsyncAPIClient
from .errors import MegaAPIError, APIErrorCodes
from .config import APIConfig, TimeoutConfig, RetryConfig

__all__ = [
    'AsyncAPIClient',
    'APIConfig',
    'TimeoutConfig',
    'RetryConfig',
    'MegaAPIError',
    'APIErrorCodes',
]
