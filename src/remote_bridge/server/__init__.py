"""
Remote Bridge server: port allocation, connections, relay and the Socket.IO/HTTP front end
"""

from .port_allocator import find_available_port, is_port_available
from .network_info import ConnectionInfo, get_local_ips
from .connection_manager import Connection, ConnectionManager, ConnectionState
from .relay import RelayProtocol
from .bridge_server import RemoteBridge

__all__ = [
    "find_available_port",
    "is_port_available",
    "ConnectionInfo",
    "get_local_ips",
    "Connection",
    "ConnectionManager",
    "ConnectionState",
    "RelayProtocol",
    "RemoteBridge",
]
