"""
Remote Bridge - LAN Remote Access for Local Sessions

Exposes a local tool's live interactive state over the local network so a
phone, tablet or browser can observe and drive the same session in real time.
"""

__version__ = "1.0.0"

from .core.session import SessionRecord
from .core.session_registry import SessionRegistry
from .core.messages import RemoteMessage
from .core.state_owner import StateOwner, CallbackStateOwner
from .server.bridge_server import RemoteBridge
from .server.network_info import ConnectionInfo
from .exceptions import BridgeStartupError, NoPortAvailableError, PortBindError

__all__ = [
    "SessionRecord",
    "SessionRegistry",
    "RemoteMessage",
    "StateOwner",
    "CallbackStateOwner",
    "RemoteBridge",
    "ConnectionInfo",
    "BridgeStartupError",
    "NoPortAvailableError",
    "PortBindError",
]
