"""Lifecycle event dispatch."""
import asyncio
import inspect
from collections import defaultdict
from typing import Callable, DefaultDict, List, Optional


class EventEmitter:
    """
    Name-keyed observer registry.

    Handlers may be plain functions or coroutine functions. ``emit``
    schedules coroutines on the running loop; ``emit_async`` awaits them
    in registration order.
    """

    def __init__(self, name: str = 'events'):
        self.name = name
        self._handlers: DefaultDict[str, List[Callable]] = defaultdict(list)

    def on(self, event: str, callback: Callable) -> 'EventEmitter':
        self._handlers[event].append(callback)
        return self

    def listeners(self, event: str) -> List[Callable]:
        return list(self._handlers.get(event, ()))

    def emit(self, event: str, *args, **kwargs) -> List[asyncio.Future]:
        """
        Call every handler of ``event`` without waiting.

        Returns:
            Futures for handlers that returned awaitables
        """
        pending = []
        for callback in self.listeners(event):
            result = callback(*args, **kwargs)
            if inspect.isawaitable(result):
                pending.append(asyncio.ensure_future(result))
        return pending

    async def emit_async(self, event: str, *args, **kwargs) -> None:
        """Call every handler of ``event``, awaiting each in turn."""
        for callback in self.listeners(event):
            result = callback(*args, **kwargs)
            if inspect.isawaitable(result):
                await result

    def off(self, event: str, callback: Optional[Callable] = None) -> 'EventEmitter':
        """Drop one handler, or every handler of ``event``."""
        if callback is None:
            self._handlers.pop(event, None)
        elif event in self._handlers:
            self._handlers[event] = [cb for cb in self._handlers[event] if cb is not callback]
        return self
