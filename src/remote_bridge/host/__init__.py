"""
Host-side state owner used when the bridge runs standalone
"""

from .local_state import LocalStateOwner, PendingRequest, Settings

__all__ = ["LocalStateOwner", "PendingRequest", "Settings"]
