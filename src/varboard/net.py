"""Viewer URL discovery

Lists the addresses a viewer on the local network can use to reach this
process. Informational only; failures degrade to the localhost URL.
"""

import socket

import psutil

from . import config
from .telemetry import get_logger

logger = get_logger(__name__)


def local_ipv4_addresses() -> list[str]:
    """Non-loopback IPv4 addresses of all interfaces, in interface order."""
    addresses: list[str] = []
    try:
        interfaces = psutil.net_if_addrs()
    except (OSError, RuntimeError) as e:
        logger.warning(f"[Net] Interface enumeration failed: {e}")
        return addresses

    for iface_addrs in interfaces.values():
        for addr in iface_addrs:
            if addr.family != socket.AF_INET or addr.address.startswith("127."):
                continue
            if addr.address not in addresses:
                addresses.append(addr.address)
    return addresses


def viewer_urls(port: int, addresses: list[str] | None = None) -> list[str]:
    """Viewer URLs for ``port``; ``http://localhost:<port>/viewer`` is always last.

    Args:
        port: Port the listener is actually bound to
        addresses: IPv4 addresses to use instead of enumerating interfaces
    """
    if addresses is None:
        addresses = local_ipv4_addresses()
    urls = [f"http://{address}:{port}{config.VIEWER_PATH}" for address in addresses]
    urls.append(f"http://localhost:{port}{config.VIEWER_PATH}")
    return urls
