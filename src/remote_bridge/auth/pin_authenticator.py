"""
PIN authentication for Remote Bridge

A short numeric secret, regenerated on every bridge start and held only in memory.
"""

import secrets
from typing import Any, Optional

from ..utils.logging_setup import get_logger

logger = get_logger('pin_authenticator')


class PinAuthenticator:
    """Generates and checks the per-start PIN"""

    def __init__(self, length: int = 4):
        if length <= 0:
            raise ValueError("PIN length must be positive")
        self.length = length
        self._pin: Optional[str] = None

    @property
    def pin(self) -> Optional[str]:
        """Current PIN, None until the first regenerate()"""
        return self._pin

    def regenerate(self) -> str:
        """Draw a fresh uniformly random PIN; leading zeros are kept"""
        self._pin = str(secrets.randbelow(10 ** self.length)).zfill(self.length)
        logger.debug("Generated new PIN")
        return self._pin

    def validate(self, candidate: Any) -> bool:
        """True only for a string exactly equal to the current PIN"""
        if self._pin is None or not isinstance(candidate, str):
            return False
        return candidate == self._pin

    def reset(self):
        """Forget the PIN so nothing validates until the next regenerate()"""
        self._pin = None
