"""
Application settings.

Settings come from the process environment, optionally pre-populated from
a ``.env`` file.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from .api import APIConfig, TimeoutConfig
from .exceptions import ConfigurationError
from .session.token import DEFAULT_MARKER
from .storage import DEFAULT_STORAGE_HOST

MODES = ('public', 'private')

DEFAULT_WELCOME_IMAGE = 'https://files.catbox.moe/scvigx.jpg'


@dataclass
class ReconnectConfig:
    """
    Reconnect policy for the messaging socket.
    
    Attempts are counted from the last successful ``open``.
    """
    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    
    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay before reconnect attempt ``attempt`` (0-based)."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)


@dataclass
class Settings:
    """
    Complete bot configuration.
    
    Attributes:
        session_id: Raw session token (``<marker><fileId>#<key>``)
        session_marker: Marker preceding the token payload
        session_dir: Directory holding ``creds.json``
        port: HTTP port
        prefix: Command prefix shown to the user
        mode: ``public`` or ``private``
        bot_name: Name used for the browser triple and greetings
        storage_host: Host used to build the remote file link
        download_timeout: Upper bound in seconds for the credential download
        socket_factory: ``module:callable`` building the messaging socket
    """
    session_id: Optional[str] = None
    session_marker: str = DEFAULT_MARKER
    session_dir: Path = Path('session')
    port: int = 3000
    prefix: str = '.'
    mode: str = 'public'
    bot_name: str = 'ASK-XMD'
    storage_host: str = DEFAULT_STORAGE_HOST
    mega_gateway: str = APIConfig.gateway
    download_timeout: float = TimeoutConfig.total
    welcome_image_url: str = DEFAULT_WELCOME_IMAGE
    socket_factory: Optional[str] = None
    log_level: str = 'INFO'
    reconnect: ReconnectConfig = field(default_factory=ReconnectConfig)
    
    def __post_init__(self):
        self.session_dir = Path(self.session_dir)
        self.mode = self.mode.strip().lower()
        if self.mode not in MODES:
            raise ConfigurationError(f"MODE must be one of {MODES}, got {self.mode!r}")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"PORT out of range: {self.port}")
        if self.download_timeout <= 0:
            raise ConfigurationError("DOWNLOAD_TIMEOUT must be positive")
        if self.reconnect.max_attempts < 0:
            raise ConfigurationError("RECONNECT_MAX_ATTEMPTS cannot be negative")
    
    @property
    def is_public(self) -> bool:
        return self.mode == 'public'
    
    @property
    def browser(self) -> Tuple[str, str, str]:
        """Browser triple announced to WhatsApp."""
        return (self.bot_name, 'safari', '3.3')
    
    @property
    def creds_path(self) -> Path:
        return self.session_dir / 'creds.json'
    
    def api_config(self) -> APIConfig:
        """MEGA API configuration bounded by ``download_timeout``."""
        return APIConfig.with_timeout(self.download_timeout, gateway=self.mega_gateway)
    
    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None
    ) -> 'Settings':
        """
        Build settings from environment variables.
        
        Args:
            env: Mapping to read instead of ``os.environ`` (no ``.env``
                loading happens when given)
            dotenv_path: Explicit ``.env`` file; defaults to searching upward
                from the working directory
        
        Raises:
            ConfigurationError: On unparsable or out-of-range values
        """
        if env is None:
            load_dotenv(dotenv_path or find_dotenv(usecwd=True), override=False)
            env = os.environ
        
        def text(key: str, default: Optional[str] = None) -> Optional[str]:
            value = env.get(key)
            if value is None or value.strip() == '':
                return default
            return value.strip()
        
        def number(key: str, default, kind=float):
            value = text(key)
            if value is None:
                return default
            try:
                return kind(value)
            except ValueError:
                raise ConfigurationError(f"{key} must be a {kind.__name__}, got {value!r}")
        
        reconnect = ReconnectConfig(
            max_attempts=number('RECONNECT_MAX_ATTEMPTS', ReconnectConfig.max_attempts, int),
            base_delay=number('RECONNECT_BASE_DELAY', ReconnectConfig.base_delay),
            max_delay=number('RECONNECT_MAX_DELAY', ReconnectConfig.max_delay),
        )
        
        return cls(
            session_id=text('SESSION_ID'),
            session_marker=text('SESSION_MARKER', DEFAULT_MARKER),
            session_dir=Path(text('SESSION_DIR', 'session')),
            port=number('PORT', cls.port, int),
            prefix=text('PREFIX', cls.prefix),
            mode=text('MODE', cls.mode),
            bot_name=text('BOT_NAME', cls.bot_name),
            storage_host=text('STORAGE_HOST', cls.storage_host),
            mega_gateway=text('MEGA_GATEWAY', cls.mega_gateway),
            download_timeout=number('DOWNLOAD_TIMEOUT', cls.download_timeout),
            welcome_image_url=text('WELCOME_IMAGE_URL', cls.welcome_image_url),
            socket_factory=text('SOCKET_FACTORY'),
            log_level=text('LOG_LEVEL', cls.log_level),
            reconnect=reconnect,
        )
