import ipaddress
import logging
import socket

import psutil

from core.models import InterfaceSignal

logger = logging.getLogger("egresscheck.interfaces")

TUNNEL_INTERFACE_KEYWORDS = ("utun", "ppp", "ipsec", "tun", "tap", "wireguard", "wg")


def _is_external_ipv4(addr) -> bool:
    if addr.family != socket.AF_INET:
        return False
    try:
        return not ipaddress.IPv4Address(addr.address).is_loopback
    except ValueError:
        return False


def scan_interfaces(keywords=TUNNEL_INTERFACE_KEYWORDS) -> InterfaceSignal:
    """Flags an active tunnel-like adapter carrying a non-loopback IPv4 address.

    Enumeration failures degrade to ``has_tunnel_interface=False``.
    """
    try:
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except (OSError, psutil.Error, RuntimeError) as e:
        logger.debug(f"Interface enumeration failed: {e}")
        return InterfaceSignal(has_tunnel_interface=False)

    for name, addresses in addrs.items():
        lower = name.lower()
        if not any(kw in lower for kw in keywords):
            continue

        st = stats.get(name)
        if st is not None and not st.isup:
            continue

        if any(_is_external_ipv4(a) for a in addresses):
            logger.debug(f"Tunnel interface detected: {name}")
            return InterfaceSignal(has_tunnel_interface=True, interface_name=name)

    return InterfaceSignal(has_tunnel_interface=False)
