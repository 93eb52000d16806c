import pytest

from backend.utils import extract_ipv4, is_private_ip


@pytest.mark.parametrize("ip", [
    "10.0.0.0", "10.255.255.255", "10.8.0.2",
    "172.16.0.1", "172.31.255.254",
    "192.168.0.1", "192.168.255.255",
    "127.0.0.1", "127.10.20.30",
])
def test_private_ranges(ip):
    """RFC1918 and loopback literals are private."""
    assert is_private_ip(ip) is True

@pytest.mark.parametrize("ip", ["8.8.8.8", "1.1.1.1", "172.15.0.1", "172.32.0.1", "192.169.0.1", "11.0.0.1"])
def test_public_addresses(ip):
    assert is_private_ip(ip) is False

@pytest.mark.parametrize("ip", ["1.2.3", "a.b.c.d", "", "1.2.3.4.5", "256.1.1.1", None, " 10.0.0.1"])
def test_malformed_input_is_not_private(ip):
    """Anything that is not four numeric octets gives False."""
    assert is_private_ip(ip) is False

def test_extract_ipv4_from_text():
    assert extract_ipv4("Current IP Address: 61.152.1.9\n") == "61.152.1.9"
    assert extract_ipv4("8.8.8.8, 10.0.0.1") == "8.8.8.8"

def test_extract_ipv4_skips_invalid_candidates():
    assert extract_ipv4("999.1.1.1 then 1.2.3.4") == "1.2.3.4"
    assert extract_ipv4("no address here") is None
    assert extract_ipv4(None) is None

@pytest.mark.parametrize("ip,expected", [
    ("010.0.0.1", True),
    ("192.168.001.001", True),
    ("0127.0.0.1", True),
    ("008.008.008.008", False),
    ("0256.1.1.1", False),
])
def test_leading_zero_octets_read_as_decimal(ip, expected):
    assert is_private_ip(ip) is expected

def test_non_ascii_digits_rejected():
    assert is_private_ip("１０.0.0.1") is False
