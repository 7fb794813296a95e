"""MEGA API error codes."""
from typing import Dict

from ..exceptions import RemoteFetchError


class APIErrorCodes:
    """Negative result codes returned by the MEGA API."""
    
    MESSAGES: Dict[int, str] = {
        -1: 'EINTERNAL: internal error',
        -2: 'EARGS: invalid arguments',
        -3: 'EAGAIN: temporary congestion, try again',
        -4: 'ERATELIMIT: too many requests',
        -9: 'ENOENT: file not found, it was removed or the link is wrong',
        -11: 'EACCESS: access denied',
        -13: 'EINCOMPLETE: resource is incomplete',
        -14: 'EKEY: decryption failed',
        -16: 'EBLOCKED: file or owner is blocked',
        -17: 'EOVERQUOTA: transfer quota exceeded',
        -18: 'ETEMPUNAVAIL: temporarily unavailable, try again later',
    }
    
    @classmethod
    def get_message(cls, code: int) -> str:
        return cls.MESSAGES.get(-abs(code), f"unknown MEGA error {code}")


class MegaAPIError(RemoteFetchError):
    """The MEGA API answered with a negative code."""
    
    def __init__(self, code: int):
        self.code = code
        self.message = f"MEGA API error {code}: {APIErrorCodes.get_message(code)}"
        super().__init__(self.message, error_code=code)
