"""
Network settings for the MEGA client that fetches the credential blob.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import aiohttp

EAGAIN = -3
ETEMPUNAVAIL = -18


@dataclass
class TimeoutConfig:
    """
    Per-session timeouts in seconds.

    ``total`` bounds the whole download, including the credential fetch
    at startup.
    """
    total: float = 60.0
    connect: float = 15.0
    sock_read: float = 30.0

    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
        )


@dataclass
class RetryConfig:
    """Backoff for transport failures and temporary MEGA error codes."""
    max_retries: int = 4
    base_delay: float = 0.25
    max_delay: float = 16.0
    exponential_base: float = 2.0
    retry_on_codes: Tuple[int, ...] = (EAGAIN, ETEMPUNAVAIL)

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retry ``attempt`` (0-based), capped at ``max_delay``."""
        return min(self.base_delay * self.exponential_base ** attempt, self.max_delay)

    def should_retry(self, error_code: int, attempt: int) -> bool:
        return attempt < self.max_retries and error_code in self.retry_on_codes


@dataclass
class APIConfig:
    """
    MEGA client configuration.

    Attributes:
        gateway: API endpoint; commands are posted to ``<gateway>cs``
        user_agent: Sent with every request
        timeout: Session timeouts
        retry: Retry policy
        proxy: Optional HTTP proxy URL
        extra_headers: Merged over the default headers
    """
    gateway: str = 'https://g.api.mega.co.nz/'
    user_agent: str = 'wabot/1.0.0'
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    proxy: Optional[str] = None
    extra_headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def default(cls) -> 'APIConfig':
        return cls()

    @classmethod
    def with_timeout(cls, total: float, **kwargs) -> 'APIConfig':
        """Configuration whose sessions never outlive ``total`` seconds."""
        timeout = TimeoutConfig(
            total=total,
            connect=min(total, TimeoutConfig.connect),
            sock_read=min(total, TimeoutConfig.sock_read),
        )
        return cls(timeout=timeout, **kwargs)

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``aiohttp.ClientSession``."""
        return {
            'headers': {'User-Agent': self.user_agent, **self.extra_headers},
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
