"""
Local network discovery for Remote Bridge connection URLs
"""

import socket
from dataclasses import dataclass, field
from typing import List

import psutil

from ..utils.logging_setup import get_logger

logger = get_logger('network_info')


def get_local_ips() -> List[str]:
    """IPv4 addresses of all non-loopback interfaces"""
    ips: List[str] = []

    try:
        interfaces = psutil.net_if_addrs()
    except OSError as e:
        logger.warning(f"Could not enumerate network interfaces: {e}")
        return ips

    for name, addresses in interfaces.items():
        for address in addresses:
            # Skip internal and non-IPv4 addresses
            if address.family != socket.AF_INET:
                continue
            if address.address.startswith("127."):
                continue
            if address.address not in ips:
                ips.append(address.address)

    return ips


@dataclass
class ConnectionInfo:
    """How a remote device reaches a running bridge"""
    urls: List[str] = field(default_factory=list)
    pin: str = ""
    port: int = 0

    @property
    def local_url(self) -> str:
        return self.urls[0] if self.urls else ""

    @property
    def network_urls(self) -> List[str]:
        return [url for url in self.urls if "localhost" not in url]

    def share_url(self) -> str:
        """Ready-to-open URL for a phone: first network URL with the PIN attached"""
        networks = self.network_urls
        base = networks[0] if networks else self.local_url
        if not base:
            return ""
        return f"{base}?pin={self.pin}"


def build_connection_info(port: int, pin: str) -> ConnectionInfo:
    """One loopback URL plus one URL per LAN address"""
    if port <= 0:
        return ConnectionInfo(urls=[], pin=pin or "", port=0)

    urls = [f"http://localhost:{port}"]
    urls.extend(f"http://{ip}:{port}" for ip in get_local_ips())
    return ConnectionInfo(urls=urls, pin=pin or "", port=port)
