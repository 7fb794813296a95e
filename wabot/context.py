"""
Application context.

One instance is created at process entry and handed to the bootstrapper,
the connection supervisor and the HTTP app.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from .core.connection import ConnectionSupervisor, MessagingSocket
from .core.events import EventEmitter
from .core.session import FileCredentialStore
from .core.settings import Settings


@dataclass
class AppContext:
    """
    Shared state for one bot process.
    
    Attributes:
        settings: Loaded settings
        store: Credential store for ``settings.session_dir``
        events: Application-wide lifecycle events
        supervisor: Connection supervisor, once the socket is started
        authenticated: Outcome of the session bootstrap
        http_app: The FastAPI app serving ``/handler``
    """
    settings: Settings
    store: FileCredentialStore
    events: EventEmitter = field(default_factory=lambda: EventEmitter('app.events'))
    supervisor: Optional[ConnectionSupervisor] = None
    authenticated: bool = False
    http_app: Optional[Any] = None
    
    @classmethod
    def create(cls, settings: Settings) -> 'AppContext':
        return cls(settings=settings, store=FileCredentialStore(settings.session_dir))
    
    @property
    def socket(self) -> Optional[MessagingSocket]:
        """The live socket, or None while disconnected."""
        if self.supervisor is None:
            return None
        return self.supervisor.socket
    
    @property
    def connected(self) -> bool:
        return bool(self.supervisor and self.supervisor.connected)
    
    @property
    def public(self) -> bool:
        if self.supervisor is not None:
            return self.supervisor.public
        return self.settings.is_public
    
    async def close(self) -> None:
        """Tear down the socket."""
        if self.supervisor is not None:
            await self.supervisor.stop()
