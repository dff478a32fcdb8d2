"""
Session Registry for Remote Bridge

Process-wide record of every running bridge instance, keyed by port.
The host constructs one registry and hands it to each bridge it starts.
"""

import threading
from typing import Dict, List, Optional

from .session import SessionRecord
from ..utils.logging_setup import get_logger

logger = get_logger('session_registry')


class SessionRegistry:
    """Insert/replace/remove store of SessionRecords

    Each bridge only ever touches its own record: it registers by port and
    unregisters by id. No expiry exists, so a bridge that dies without
    unregistering stays listed until the host process restarts.
    """

    def __init__(self):
        self._records: Dict[str, SessionRecord] = {}
        self._lock = threading.RLock()

    def register(self, record: SessionRecord) -> None:
        """Insert a record, replacing any existing record on the same port"""
        with self._lock:
            stale_ids = [
                session_id for session_id, existing in self._records.items()
                if existing.port == record.port
            ]
            for session_id in stale_ids:
                logger.info(f"Replacing stale session {session_id} on port {record.port}")
                del self._records[session_id]

            self._records[record.id] = record

        logger.info(f"Registered session {record.id} ({record.label}) on port {record.port}")

    def unregister(self, session_id: str) -> bool:
        """Remove a record by id"""
        with self._lock:
            record = self._records.pop(session_id, None)

        if record is None:
            logger.debug(f"Session {session_id} was not registered")
            return False

        logger.info(f"Unregistered session {session_id} on port {record.port}")
        return True

    def list(self) -> List[SessionRecord]:
        """Get all registered records in registration order"""
        with self._lock:
            return list(self._records.values())

    def get(self, session_id: str) -> Optional[SessionRecord]:
        """Get a record by id"""
        with self._lock:
            return self._records.get(session_id)

    def get_by_port(self, port: int) -> Optional[SessionRecord]:
        with self._lock:
            for record in self._records.values():
                if record.port == port:
                    return record
        return None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._records
