"""
Connection supervisor.

Builds the messaging socket, wires its lifecycle events and reconnects
with bounded exponential backoff when the connection drops.
"""
import asyncio
import importlib
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from .protocols import MessagingSocket, SocketFactory
from .updates import ConnectionUpdate
from ..events import EventEmitter
from ..exceptions import ConfigurationError, SocketError
from ..logging import get_logger
from ..session import FileCredentialStore
from ..settings import Settings

logger = get_logger('connection')

GREETING_FOOTER = '> *© Pᴏᴡᴇʀᴇᴅ Bʏ ask Iɴᴄ.♡*🖤'


def load_socket_factory(path: Optional[str]) -> SocketFactory:
    """
    Resolve a ``package.module:callable`` path.
    
    Raises:
        ConfigurationError: If the path is missing, malformed or unresolvable
    """
    if not path:
        raise ConfigurationError("SOCKET_FACTORY is not configured")
    module_name, sep, attr = path.partition(':')
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"SOCKET_FACTORY must look like 'module:callable', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import socket factory module {module_name!r}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigurationError(f"{path!r} is not callable")
    return factory


def _user_id(user: Any) -> Optional[str]:
    if user is None:
        return None
    if isinstance(user, dict):
        return user.get('id')
    return getattr(user, 'id', None)


class ConnectionSupervisor:
    """
    Owns the messaging socket for the lifetime of the process.
    
    Lifecycle events are mirrored on ``events``:
    ``connection.open``, ``connection.close``, ``connection.logged_out``
    and ``connection.failed``.
    """
    
    def __init__(
        self,
        settings: Settings,
        factory: SocketFactory,
        store: Optional[FileCredentialStore] = None,
        events: Optional[EventEmitter] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.settings = settings
        self.store = store or FileCredentialStore(settings.session_dir)
        self.events = events or EventEmitter('connection.events')
        self.public = settings.is_public
        self.socket: Optional[MessagingSocket] = None
        self.connected = False
        self._factory = factory
        self._sleep = sleep
        self._attempts = 0
        self._listeners: List[Tuple[str, Callable]] = []
        self._tasks: Set[asyncio.Future] = set()
        self._stopped = asyncio.Event()
        self._stop_reason: Optional[str] = None
    
    @property
    def attempts(self) -> int:
        """Reconnect attempts since the last successful open."""
        return self._attempts
    
    @property
    def stop_reason(self) -> Optional[str]:
        return self._stop_reason
    
    @property
    def pending_tasks(self) -> int:
        """Socket event handlers still running."""
        return len(self._tasks)
    
    async def get_message(self, key: Dict[str, Any]) -> Dict[str, str]:
        """Placeholder served when the library asks for a message to retry."""
        return {'conversation': f"{self.settings.bot_name} whatsapp user bot"}
    
    async def start(self) -> MessagingSocket:
        """
        Build the socket and register lifecycle handlers.
        
        Raises:
            SocketError: If the factory fails or returns nothing usable
        """
        library_logger = logging.getLogger(f"{logger.name}.library")
        library_logger.setLevel(logging.CRITICAL + 1)
        
        try:
            result = self._factory(
                auth_dir=self.settings.session_dir,
                browser=self.settings.browser,
                print_qr_in_terminal=True,
                logger=library_logger,
                get_message=self.get_message,
            )
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise SocketError(f"Critical error while creating socket: {e!r}") from e
        
        if result is None or getattr(result, 'ev', None) is None:
            raise SocketError("Socket factory returned an object without an event source")
        
        self._attach(result)
        logger.info(f"Socket created, bot mode: {'public' if self.public else 'private'}")
        return self.socket
    
    def _attach(self, socket: MessagingSocket) -> None:
        # Updates carry their source so a late event from a replaced socket is ignored
        def on_update(payload: Any) -> asyncio.Future:
            return self._track(self.handle_update(payload, source=socket))
        
        def on_creds(creds: Any) -> asyncio.Future:
            return self._track(self.handle_creds(creds))
        
        self.socket = socket
        self._listeners = [('connection.update', on_update), ('creds.update', on_creds)]
        for event, callback in self._listeners:
            socket.ev.on(event, callback)
    
    def _detach(self) -> Optional[MessagingSocket]:
        socket, self.socket = self.socket, None
        if socket is not None:
            for event, callback in self._listeners:
                socket.ev.off(event, callback)
        self._listeners = []
        return socket
    
    def _track(self, coro: Awaitable[Any]) -> asyncio.Future:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task
    
    def _task_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Socket event handler failed: {error!r}", exc_info=error)
    
    async def handle_creds(self, creds: Any) -> None:
        """Merge credentials pushed by the library into the store."""
        if not isinstance(creds, dict):
            creds = dict(getattr(creds, '__dict__', {}))
        await self.store.save_creds(creds)
    
    async def handle_update(self, payload: Any, source: Optional[MessagingSocket] = None) -> None:
        """
        React to one ``connection.update`` notification.
        
        Args:
            payload: Library payload, see ``ConnectionUpdate.from_event``
            source: Socket that emitted it; updates from a socket other than
                the current one are dropped
        """
        if source is not None and source is not self.socket:
            logger.debug("Ignoring update from a replaced socket")
            return
        
        update = ConnectionUpdate.from_event(payload)
        
        if update.qr:
            logger.info("Waiting for QR code scan")
        
        if update.connection == 'open':
            await self._on_open()
        elif update.connection == 'close':
            await self._on_close(update)
    
    async def _on_open(self) -> None:
        self.connected = True
        self._attempts = 0
        logger.info(f"Connected successfully as {self.settings.bot_name}")
        await self.events.emit_async('connection.open', self.socket)
        await self._send_greeting()
    
    async def _send_greeting(self) -> None:
        user_id = _user_id(getattr(self.socket, 'user', None))
        if not user_id:
            logger.warning("Connected socket has no user id, skipping greeting")
            return
        
        name = self.settings.bot_name
        caption = (
            f"*Hello there {name} User! 👋🏻*\n\n"
            f"> Bot connected\n\n"
            f"*Thanks for using {name}*\n\n"
            f"- *YOUR PREFIX:* = {self.settings.prefix}\n\n"
            f"{GREETING_FOOTER}"
        )
        try:
            await self.socket.send_message(user_id, {
                'image': {'url': self.settings.welcome_image_url},
                'caption': caption,
            })
        except Exception as e:
            logger.warning(f"Failed to send greeting to {user_id}: {e!r}")
    
    async def _on_close(self, update: ConnectionUpdate) -> None:
        self.connected = False
        await self._end(self._detach())
        await self.events.emit_async('connection.close', update)
        
        if update.logged_out:
            logger.warning("Logged out, not reconnecting. Delete the session and pair again.")
            await self.events.emit_async('connection.logged_out', update)
            self._finish('logged out')
            return
        
        logger.warning(f"Connection closed (status {update.status_code}), reconnecting")
        await self._reconnect()
    
    async def _end(self, socket: Optional[MessagingSocket]) -> None:
        if socket is None or not hasattr(socket, 'end'):
            return
        try:
            result = socket.end()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Error while closing socket: {e!r}")
    
    async def _reconnect(self) -> None:
        policy = self.settings.reconnect
        while self._attempts < policy.max_attempts:
            delay = policy.calculate_delay(self._attempts)
            self._attempts += 1
            logger.info(
                f"Reconnect attempt {self._attempts}/{policy.max_attempts} in {delay:.1f}s"
            )
            await self._sleep(delay)
            try:
                await self.start()
                return
            except SocketError as e:
                logger.error(f"Reconnect attempt {self._attempts} failed: {e}")
        
        logger.error(f"Giving up after {self._attempts} reconnect attempts")
        await self.events.emit_async('connection.failed', self._attempts)
        self._finish('reconnect attempts exhausted')
    
    def _finish(self, reason: str) -> None:
        self._stop_reason = reason
        self._stopped.set()
    
    async def wait_stopped(self) -> str:
        """Block until the supervisor gives up; returns the reason."""
        await self._stopped.wait()
        return self._stop_reason
    
    async def stop(self) -> None:
        """Cancel pending handlers and close the socket, if any."""
        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        
        self.connected = False
        await self._end(self._detach())
        self._finish('stopped')
