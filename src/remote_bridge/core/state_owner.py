"""
State owner interface for Remote Bridge

The authoritative application implements StateOwner and hands it to the
bridge at construction. The bridge never mutates application state itself.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union, runtime_checkable

from .messages import RemoteMessage

Snapshot = Dict[str, Any]
Responder = Callable[[Union[RemoteMessage, Dict[str, Any]]], Awaitable[bool]]


@runtime_checkable
class StateOwner(Protocol):
    """Two-method capability the bridge needs from the application"""

    def get_snapshot(self) -> Snapshot:
        """Current state, pulled once per successful client authentication"""
        ...

    def on_inbound_message(self, message: RemoteMessage, respond: Responder) -> Any:
        """Handle a message from an authenticated client.

        May be a coroutine function. Results are ignored; replies go through
        `respond` (that client only) or the bridge's broadcast.
        """
        ...


class CallbackStateOwner:
    """Adapts a pair of plain callables to the StateOwner interface"""

    def __init__(self,
                 get_snapshot: Callable[[], Snapshot],
                 on_message: Optional[Callable[..., Any]] = None):
        self._get_snapshot = get_snapshot
        self._on_message = on_message

    def get_snapshot(self) -> Snapshot:
        return self._get_snapshot()

    async def on_inbound_message(self, message: RemoteMessage, respond: Responder) -> None:
        if self._on_message is None:
            return

        result = self._on_message(message, respond)
        if inspect.isawaitable(result):
            await result


async def dispatch_inbound(owner: StateOwner, message: RemoteMessage, respond: Responder) -> None:
    """Call owner.on_inbound_message, awaiting it when it is a coroutine"""
    handler = owner.on_inbound_message
    if asyncio.iscoroutinefunction(handler):
        await handler(message, respond)
        return

    result = handler(message, respond)
    if inspect.isawaitable(result):
        await result
