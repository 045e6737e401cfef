"""URL checks shared by the rewriter and the relay."""

from __future__ import annotations

import ipaddress
import socket
from urllib.parse import urlsplit


# Private/reserved IP networks
_PRIVATE_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

_ALLOWED_SCHEMES = {"http", "https"}


def is_http_url(url: object) -> bool:
    """Return True for an absolute http/https URL with a host."""
    if not isinstance(url, str) or not url or url != url.strip():
        return False
    try:
        parsed = urlsplit(url)
        _ = parsed.port  # raises on a malformed netloc
    except ValueError:
        return False
    return parsed.scheme.lower() in _ALLOWED_SCHEMES and bool(parsed.hostname)


def is_private_ip(ip_str: str) -> bool:
    """Check if an IP address is in a private/reserved range."""
    try:
        addr = ipaddress.ip_address(ip_str)
        return any(addr in network for network in _PRIVATE_NETWORKS)
    except ValueError:
        return True  # Invalid IP → reject


def resolves_to_private_network(url: str) -> bool:
    """Resolve the URL's host and report whether any address is private.

    Unresolvable hosts count as private so that they are refused.
    """
    hostname = urlsplit(url).hostname
    if not hostname:
        return True
    try:
        infos = socket.getaddrinfo(hostname, None)
    except (socket.gaierror, UnicodeError, OSError):
        return True
    return any(is_private_ip(info[4][0]) for info in infos)
