"""
Core components for Remote Bridge

Contains the session record and registry, wire messages, and the state owner interface.
"""

from .session import SessionRecord, generate_session_id
from .session_registry import SessionRegistry
from .messages import (
    WireEvent,
    AuthenticateRequest,
    AuthenticationResult,
    InitialState,
    ErrorNotice,
    RemoteMessage,
)
from .state_owner import StateOwner, CallbackStateOwner, Snapshot

__all__ = [
    "SessionRecord",
    "generate_session_id",
    "SessionRegistry",
    "WireEvent",
    "AuthenticateRequest",
    "AuthenticationResult",
    "InitialState",
    "ErrorNotice",
    "RemoteMessage",
    "StateOwner",
    "CallbackStateOwner",
    "Snapshot",
]
