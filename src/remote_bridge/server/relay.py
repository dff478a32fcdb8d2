"""
State sync and relay for Remote Bridge

Forwards messages from authenticated clients to the state owner, fans
state owner broadcasts out to authenticated clients, and hands each newly
authenticated client a fresh snapshot.

Broadcasts are fire-and-forget: no acknowledgment, no retry and no global
sequence numbers. A client that misses something catches up through the
snapshot on its next authentication.
"""

import asyncio
from typing import Any, Dict, Optional, Union

from ..core.messages import (
    AuthenticateRequest,
    ErrorNotice,
    INVALID_MESSAGE,
    NOT_AUTHENTICATED,
    RemoteMessage,
)
from ..core.state_owner import Snapshot, StateOwner, dispatch_inbound
from ..exceptions import InvalidMessageError, NotAuthenticatedError
from ..utils.error_handler import ErrorHandler
from ..utils.logging_setup import get_logger
from .connection_manager import ConnectionManager

logger = get_logger('relay')


class RelayProtocol:
    """Bidirectional relay between remote connections and the state owner"""

    def __init__(self, connections: ConnectionManager, state_owner: StateOwner,
                 error_handler: Optional[ErrorHandler] = None,
                 session_id: Optional[str] = None):
        self.connections = connections
        self.state_owner = state_owner
        self.error_handler = error_handler or ErrorHandler()
        self.session_id = session_id
        self.stats = {
            'messages_relayed': 0,
            'messages_rejected': 0,
            'broadcasts': 0,
            'broadcast_deliveries': 0,
            'snapshots_sent': 0,
        }

    async def handle_authenticate(self, connection_id: str, payload: Any) -> bool:
        """Run the PIN handshake for one connection"""
        request = AuthenticateRequest.from_payload(payload)
        connection = self.connections.get(connection_id)
        delivered_before = connection.snapshots_received if connection else 0

        success = await self.connections.on_authenticate(
            connection_id, request.pin, self._pull_snapshot
        )
        if connection is not None and connection.snapshots_received > delivered_before:
            self.stats['snapshots_sent'] += 1
        return success

    def _pull_snapshot(self) -> Optional[Snapshot]:
        # Pulled fresh on every authentication, never cached
        try:
            return self.state_owner.get_snapshot()
        except Exception as e:
            self.error_handler.record_error(e, {'stage': 'snapshot'}, session_id=self.session_id)
            return None

    async def handle_inbound(self, connection_id: str, payload: Any) -> bool:
        """Forward a client message to the state owner if the sender is authenticated"""
        connection = self.connections.get(connection_id)
        if connection is None or not connection.authenticated:
            self.stats['messages_rejected'] += 1
            await self.error_handler.handle_error(
                NotAuthenticatedError(f"Message from unauthenticated connection {connection_id}"),
                {'stage': 'relay'}, session_id=self.session_id, connection_id=connection_id
            )
            await self.connections.send(connection_id, ErrorNotice(NOT_AUTHENTICATED))
            return False

        try:
            message = RemoteMessage.from_payload(payload)
        except InvalidMessageError as e:
            self.stats['messages_rejected'] += 1
            await self.error_handler.handle_error(
                e, {'stage': 'relay'}, session_id=self.session_id, connection_id=connection_id
            )
            await self.connections.send(connection_id, ErrorNotice(INVALID_MESSAGE))
            return False

        connection.messages_received += 1
        logger.debug(f"Relaying {message.type} from {connection_id}")

        async def respond(reply: Union[RemoteMessage, Dict[str, Any]]) -> bool:
            return await self.connections.send(connection_id, RemoteMessage.coerce(reply))

        try:
            await dispatch_inbound(self.state_owner, message, respond)
        except Exception as e:
            await self.error_handler.handle_error(
                e, {'stage': 'relay', 'message_type': message.type},
                session_id=self.session_id, connection_id=connection_id
            )
            return False

        self.stats['messages_relayed'] += 1
        return True

    async def broadcast(self, message: Union[RemoteMessage, Dict[str, Any]]) -> int:
        """Send a message to every authenticated connection; returns deliveries"""
        try:
            outbound = RemoteMessage.coerce(message)
        except InvalidMessageError as e:
            await self.error_handler.handle_error(
                e, {'stage': 'relay', 'direction': 'broadcast'}, session_id=self.session_id
            )
            return 0

        recipients = self.connections.authenticated_connections()
        self.stats['broadcasts'] += 1

        if not recipients:
            return 0

        results = await asyncio.gather(
            *(self.connections.send(c.connection_id, outbound) for c in recipients)
        )
        delivered = sum(1 for ok in results if ok)

        if delivered < len(recipients):
            logger.warning(
                f"Broadcast {outbound.type} reached {delivered}/{len(recipients)} clients"
            )

        self.stats['broadcast_deliveries'] += delivered
        return delivered

    def get_stats(self) -> dict:
        return dict(self.stats)
