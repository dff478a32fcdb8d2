"""
Exceptions raised by Remote Bridge
"""

from typing import Optional


class RemoteBridgeError(Exception):
    """Base class for all Remote Bridge errors"""


class BridgeStartupError(RemoteBridgeError):
    """The bridge could not start listening"""


class NoPortAvailableError(BridgeStartupError):
    """No bindable port was found after scanning forward from the preferred one"""

    def __init__(self, start_port: int, attempts: int):
        self.start_port = start_port
        self.attempts = attempts
        super().__init__(
            f"Could not find available port after {attempts} attempts "
            f"starting at {start_port}"
        )


class PortBindError(BridgeStartupError):
    """The allocated port was taken between probing and the final bind"""

    def __init__(self, port: int, host: str, cause: Optional[BaseException] = None):
        self.port = port
        self.host = host
        message = f"Failed to bind {host}:{port}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class AuthenticationError(RemoteBridgeError):
    """A remote client presented a PIN that does not match"""


class NotAuthenticatedError(RemoteBridgeError):
    """A remote client sent an application message before authenticating"""


class InvalidMessageError(RemoteBridgeError):
    """An inbound payload is not a type-tagged message"""
