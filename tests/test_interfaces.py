import socket
from types import SimpleNamespace
from unittest.mock import patch

import psutil

from agent.interfaces import scan_interfaces


def _addr(address, family=socket.AF_INET):
    return SimpleNamespace(family=family, address=address)

def _up(*names, isup=True):
    return {n: SimpleNamespace(isup=isup) for n in names}


def test_tunnel_with_ipv4_detected():
    addrs = {"en0": [_addr("192.168.1.20")], "utun3": [_addr("10.8.0.2")]}
    with patch("agent.interfaces.psutil.net_if_addrs", return_value=addrs), \
         patch("agent.interfaces.psutil.net_if_stats", return_value=_up("en0", "utun3")):
        signal = scan_interfaces()
    assert signal.has_tunnel_interface is True
    assert signal.interface_name == "utun3"

def test_name_match_is_case_insensitive():
    addrs = {"WireGuard Tunnel": [_addr("10.66.0.2")]}
    with patch("agent.interfaces.psutil.net_if_addrs", return_value=addrs), \
         patch("agent.interfaces.psutil.net_if_stats", return_value={}):
        assert scan_interfaces().has_tunnel_interface is True

def test_tunnel_without_ipv4_ignored():
    """utun adapters with only IPv6 link-local addresses are common on macOS."""
    addrs = {"utun0": [_addr("fe80::1", family=socket.AF_INET6)]}
    with patch("agent.interfaces.psutil.net_if_addrs", return_value=addrs), \
         patch("agent.interfaces.psutil.net_if_stats", return_value=_up("utun0")):
        assert scan_interfaces().has_tunnel_interface is False

def test_loopback_address_is_internal():
    addrs = {"tun0": [_addr("127.0.0.1")]}
    with patch("agent.interfaces.psutil.net_if_addrs", return_value=addrs), \
         patch("agent.interfaces.psutil.net_if_stats", return_value=_up("tun0")):
        assert scan_interfaces().has_tunnel_interface is False

def test_down_interface_ignored():
    addrs = {"wg0": [_addr("10.0.0.5")]}
    with patch("agent.interfaces.psutil.net_if_addrs", return_value=addrs), \
         patch("agent.interfaces.psutil.net_if_stats", return_value=_up("wg0", isup=False)):
        assert scan_interfaces().has_tunnel_interface is False

def test_regular_interfaces_ignored():
    addrs = {"eth0": [_addr("203.0.113.7")], "lo": [_addr("127.0.0.1")]}
    with patch("agent.interfaces.psutil.net_if_addrs", return_value=addrs), \
         patch("agent.interfaces.psutil.net_if_stats", return_value=_up("eth0", "lo")):
        signal = scan_interfaces()
    assert signal.has_tunnel_interface is False
    assert signal.interface_name is None

def test_enumeration_failure_degrades_to_false():
    with patch("agent.interfaces.psutil.net_if_addrs", side_effect=psutil.AccessDenied()):
        assert scan_interfaces().has_tunnel_interface is False
    with patch("agent.interfaces.psutil.net_if_addrs", side_effect=OSError("permission denied")):
        assert scan_interfaces().has_tunnel_interface is False

def test_custom_keywords():
    addrs = {"myvpn0": [_addr("10.1.0.2")]}
    with patch("agent.interfaces.psutil.net_if_addrs", return_value=addrs), \
         patch("agent.interfaces.psutil.net_if_stats", return_value=_up("myvpn0")):
        assert scan_interfaces().has_tunnel_interface is False
        assert scan_interfaces(keywords=("vpn",)).has_tunnel_interface is True
