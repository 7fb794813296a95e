"""
Messaging socket protocols.

The WhatsApp protocol itself lives in a third-party library; wabot only
relies on this narrow surface of its socket object.
"""
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union, runtime_checkable


@runtime_checkable
class EventSource(Protocol):
    """Anything exposing ``on`` and ``off`` for event callbacks."""
    
    def on(self, event: str, callback: Callable) -> Any:
        ...
    
    def off(self, event: str, callback: Callable) -> Any:
        ...


@runtime_checkable
class MessagingSocket(Protocol):
    """
    Socket produced by the messaging library.
    
    Attributes:
        ev: Event source emitting ``connection.update`` and ``creds.update``
        user: Logged-in account (mapping or object with an ``id``), None
            until the connection opens
    """
    ev: EventSource
    user: Optional[Any]
    
    async def send_message(self, jid: str, content: Dict[str, Any]) -> Any:
        """Send a message to ``jid``."""
        ...
    
    async def end(self) -> None:
        """Close the connection."""
        ...


class SocketFactory(Protocol):
    """
    Callable building a socket.
    
    Receives ``auth_dir``, ``browser``, ``print_qr_in_terminal``,
    ``logger`` and ``get_message`` keyword arguments and returns a
    MessagingSocket (or an awaitable resolving to one).
    """
    
    def __call__(self, **kwargs: Any) -> Union[MessagingSocket, Awaitable[MessagingSocket]]:
        ...
