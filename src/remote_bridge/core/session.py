"""
Session record model for Remote Bridge

Defines the SessionRecord dataclass that describes one running bridge instance.
"""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

DEFAULT_LABEL = "Untitled Workspace"


def generate_session_id() -> str:
    """Generate an opaque session token: session_<epoch ms>_<7 base36 chars>"""
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"session_{int(time.time() * 1000)}_{suffix}"


@dataclass
class SessionRecord:
    """Registry entry for one live bridge instance"""

    id: str
    port: int
    secret: str
    label: str = DEFAULT_LABEL
    started_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Post-initialization validation"""
        if not self.id:
            raise ValueError("Session ID cannot be empty")
        if not 0 < self.port <= 65535:
            raise ValueError(f"Invalid session port: {self.port}")
        if not self.label:
            self.label = DEFAULT_LABEL

    @property
    def start_time_ms(self) -> int:
        """Start time as epoch milliseconds"""
        return int(self.started_at.timestamp() * 1000)

    def to_dict(self, include_secret: bool = False) -> Dict[str, Any]:
        """Convert the record to its JSON listing form"""
        data = {
            "id": self.id,
            "label": self.label,
            "workspaceName": self.label,
            "port": self.port,
            "startTime": self.start_time_ms,
            "startedAt": self.started_at.isoformat(),
        }
        if include_secret:
            data["pin"] = self.secret
        return data
