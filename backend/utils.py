import ipaddress
import re
from typing import Optional

PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
)

IPV4_PATTERN = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")


def parse_ipv4(ip) -> Optional[ipaddress.IPv4Address]:
    if not isinstance(ip, str):
        return None
    try:
        return ipaddress.IPv4Address(ip)
    except ValueError:
        return None


def is_private_ip(ip) -> bool:
    """True for RFC1918 and loopback IPv4 literals; malformed input is False.

    Octets are read as decimal, so "010.0.0.1" counts as 10.0.0.1.
    """
    if not isinstance(ip, str):
        return False
    parts = ip.split(".")
    if len(parts) != 4 or not all(p.isascii() and p.isdigit() for p in parts):
        return False
    octets = [int(p) for p in parts]
    if any(o > 255 for o in octets):
        return False
    addr = ipaddress.IPv4Address(bytes(octets))
    return any(addr in net for net in PRIVATE_NETWORKS)


def extract_ipv4(text) -> Optional[str]:
    """First valid IPv4 literal embedded in ``text``, if any."""
    if not text:
        return None
    for candidate in IPV4_PATTERN.findall(str(text)):
        if parse_ipv4(candidate):
            return candidate
    return None
