"""
Port allocation for Remote Bridge

Scans forward from a preferred port for one that can be bound.
"""

import socket
import sys

from ..exceptions import NoPortAvailableError
from ..utils.logging_setup import get_logger

logger = get_logger('port_allocator')

MAX_PORT = 65535
DEFAULT_MAX_ATTEMPTS = 100

# On Windows SO_REUSEADDR lets a second listener steal a bound port
REUSE_ADDRESS = sys.platform != 'win32'


def is_port_available(port: int, host: str = "0.0.0.0") -> bool:
    """Probe a port by binding it and releasing it immediately

    The port is free again when this returns, so another process may claim
    it before the caller binds for real.
    """
    if not 0 < port <= MAX_PORT:
        return False

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        # Same bind options as aiohttp's TCPSite, so a port left in
        # TIME_WAIT by our own previous run still counts as free
        if REUSE_ADDRESS:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(1)
        return True
    except OSError as e:
        logger.debug(f"Port {port} unavailable: {e}")
        return False
    finally:
        sock.close()


def find_available_port(preferred_port: int,
                        host: str = "0.0.0.0",
                        max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> int:
    """Return the first bindable port >= preferred_port"""
    port = preferred_port

    for _ in range(max_attempts):
        if is_port_available(port, host):
            if port != preferred_port:
                logger.info(f"Preferred port {preferred_port} busy, using {port}")
            return port
        port += 1

    raise NoPortAvailableError(preferred_port, max_attempts)
