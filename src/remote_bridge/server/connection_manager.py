"""
Connection Manager for Remote Bridge

Tracks every open transport connection of one bridge instance and its
authentication state.

State machine per connection:
    CONNECTING --PIN match--> AUTHENTICATED
    CONNECTING --PIN mismatch--> CONNECTING (retry allowed)
    any --disconnect--> CLOSED (terminal, connection removed)
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..auth.pin_authenticator import PinAuthenticator
from ..core.messages import AuthenticationResult, InitialState, OutboundMessage
from ..core.state_owner import Snapshot
from ..exceptions import AuthenticationError
from ..utils.error_handler import ErrorHandler
from ..utils.logging_setup import get_logger

logger = get_logger('connection_manager')

# emit(event, data, to=connection_id), the Socket.IO server's emit
Emitter = Callable[..., Awaitable[Any]]
SnapshotProvider = Callable[[], Optional[Snapshot]]


class ConnectionState(Enum):
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass
class Connection:
    """One remote transport connection"""

    connection_id: str
    state: ConnectionState = ConnectionState.CONNECTING
    connected_at: datetime = field(default_factory=datetime.now)
    authenticated_at: Optional[datetime] = None
    failed_attempts: int = 0
    messages_received: int = 0
    snapshots_received: int = 0
    # Serialises sends so the handshake lands before any broadcast
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def authenticated(self) -> bool:
        return self.state == ConnectionState.AUTHENTICATED

    def to_dict(self) -> dict:
        return {
            "connection_id": self.connection_id,
            "state": self.state.value,
            "connected_at": self.connected_at.isoformat(),
            "authenticated_at": self.authenticated_at.isoformat() if self.authenticated_at else None,
            "failed_attempts": self.failed_attempts,
            "messages_received": self.messages_received,
            "snapshots_received": self.snapshots_received,
        }


class ConnectionManager:
    """Open connections of one bridge instance"""

    def __init__(self, authenticator: PinAuthenticator, emitter: Emitter,
                 error_handler: Optional[ErrorHandler] = None):
        self.authenticator = authenticator
        self._emit = emitter
        self.error_handler = error_handler or ErrorHandler()
        self._connections: Dict[str, Connection] = {}

    def on_connect(self, connection_id: str) -> Connection:
        """Track a new, unauthenticated connection"""
        connection = Connection(connection_id=connection_id)
        self._connections[connection_id] = connection
        logger.info(f"Client connected: {connection_id}")
        return connection

    async def on_authenticate(self, connection_id: str, candidate: Any,
                              snapshot_provider: SnapshotProvider) -> bool:
        """Check a PIN; on success acknowledge and push a fresh snapshot"""
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.warning(f"Authentication from unknown connection {connection_id}")
            return False

        async with connection.send_lock:
            if not self.authenticator.validate(candidate):
                connection.failed_attempts += 1
                self.error_handler.record_error(
                    AuthenticationError(
                        f"Invalid PIN from {connection_id} "
                        f"(attempt {connection.failed_attempts})"
                    ),
                    {'stage': 'authenticate', 'failed_attempts': connection.failed_attempts},
                    connection_id=connection_id
                )
                await self._send_unlocked(connection, AuthenticationResult.rejected())
                return False

            connection.state = ConnectionState.AUTHENTICATED
            connection.authenticated_at = datetime.now()
            logger.info(f"Client authenticated: {connection_id}")

            await self._send_unlocked(connection, AuthenticationResult.accepted())

            snapshot = snapshot_provider()
            if snapshot is not None and await self._send_unlocked(connection, InitialState(snapshot)):
                connection.snapshots_received += 1

        return True

    def on_disconnect(self, connection_id: str) -> Optional[Connection]:
        """Forget a connection; disconnect is normal lifecycle"""
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            return None

        connection.state = ConnectionState.CLOSED
        logger.info(f"Client disconnected: {connection_id}")
        return connection

    async def send(self, connection_id: str, message: OutboundMessage) -> bool:
        """Point-to-point send, ordered with every other send to that connection"""
        connection = self._connections.get(connection_id)
        if connection is None:
            return False

        async with connection.send_lock:
            if connection.state == ConnectionState.CLOSED:
                return False
            return await self._send_unlocked(connection, message)

    async def _send_unlocked(self, connection: Connection, message: OutboundMessage) -> bool:
        try:
            await self._emit(message.event.value, message.to_payload(), to=connection.connection_id)
            return True
        except Exception as e:
            logger.warning(f"Failed to send {message.event.value} to {connection.connection_id}: {e}")
            return False

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def is_authenticated(self, connection_id: str) -> bool:
        connection = self._connections.get(connection_id)
        return connection is not None and connection.authenticated

    def authenticated_connections(self) -> List[Connection]:
        """Connections that currently receive broadcasts"""
        return [c for c in self._connections.values() if c.authenticated]

    def clear(self) -> int:
        """Drop every connection without flushing; used on bridge shutdown"""
        count = len(self._connections)
        for connection in self._connections.values():
            connection.state = ConnectionState.CLOSED
        self._connections.clear()
        return count

    def stats(self) -> dict:
        total = len(self._connections)
        authenticated = len(self.authenticated_connections())
        return {
            'total_connections': total,
            'authenticated_connections': authenticated,
            'pending_connections': total - authenticated,
        }

    def __len__(self) -> int:
        return len(self._connections)
