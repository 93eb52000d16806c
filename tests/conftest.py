import pytest

from core.models import GeoInfo


@pytest.fixture
def make_geo():
    def _make(**overrides):
        data = {
            "ip": "203.0.113.5",
            "country_code": "CN",
            "country": "China",
            "region": "Shanghai",
            "city": "Shanghai",
            "isp": "",
            "org": "",
        }
        data.update(overrides)
        return GeoInfo(**data)
    return _make
