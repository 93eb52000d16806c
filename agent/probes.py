import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Optional, Sequence

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from backend.utils import extract_ipv4, is_private_ip
from core.models import GeoInfo, GeoStatus

logger = logging.getLogger("egresscheck.probes")

DEFAULT_PROBE_TIMEOUT = 2.0
DEFAULT_GEO_TIMEOUT = 5.0
GEO_API_URL = "http://ip-api.com/json/"
IP_FIELDS = ("ip", "query", "origin")
USER_AGENT = "egresscheck/1.0"
MAX_ECHO_BODY = 4096


def new_session() -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


class ProbeEndpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    timeout: float = DEFAULT_PROBE_TIMEOUT


# Same-region echo services, fastest first
DEFAULT_DOMESTIC_ENDPOINTS = (
    ProbeEndpoint(url="https://ip.3322.net"),
    ProbeEndpoint(url="https://api.ipify.org?format=json"),
    ProbeEndpoint(url="https://checkip.amazonaws.com"),
)


def parse_echo_body(text: str) -> Optional[str]:
    """Pulls an IPv4 literal from an echo response, JSON first then plain text."""
    try:
        data = json.loads(text)
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in IP_FIELDS:
            ip = extract_ipv4(data.get(key))
            if ip:
                return ip
        return None

    return extract_ipv4(text)


class DomesticEgressResolver:
    def __init__(self, endpoints: Sequence[ProbeEndpoint] = DEFAULT_DOMESTIC_ENDPOINTS, session: Optional[requests.Session] = None):
        self.endpoints = tuple(endpoints)
        self.session = session or new_session()

    def _fetch(self, endpoint: ProbeEndpoint, deadline: float) -> Optional[str]:
        res = self.session.get(endpoint.url, timeout=endpoint.timeout, stream=True)
        try:
            if not res.ok:
                logger.debug(f"Domestic probe {endpoint.url} returned {res.status_code}")
                return None

            body = b""
            for chunk in res.iter_content(chunk_size=1):
                body += chunk
                if time.monotonic() > deadline:
                    raise requests.Timeout(f"deadline of {endpoint.timeout}s exceeded while reading")
                if len(body) >= MAX_ECHO_BODY:
                    break
            return body.decode(res.encoding or "utf-8", errors="replace")
        finally:
            res.close()

    def probe(self, endpoint: ProbeEndpoint) -> Optional[str]:
        """One attempt, abandoned once its wall-clock timeout passes."""
        deadline = time.monotonic() + endpoint.timeout
        pool = ThreadPoolExecutor(max_workers=1)
        future = pool.submit(self._fetch, endpoint, deadline)
        try:
            text = future.result(timeout=endpoint.timeout)
        except FutureTimeout:
            logger.debug(f"Domestic probe {endpoint.url} abandoned after {endpoint.timeout}s")
            return None
        except requests.RequestException as e:
            logger.debug(f"Domestic probe {endpoint.url} failed: {e}")
            return None
        finally:
            pool.shutdown(wait=False)

        if text is None:
            return None

        ip = parse_echo_body(text)
        if not ip or is_private_ip(ip):
            logger.debug(f"Domestic probe {endpoint.url} gave no public address")
            return None
        return ip

    def resolve(self) -> Optional[str]:
        """Sequential fallback; the first valid public address wins."""
        for endpoint in self.endpoints:
            ip = self.probe(endpoint)
            if ip:
                logger.info(f"Domestic egress: {ip} ({endpoint.url})")
                return ip

        logger.info("Domestic egress unavailable, falling back to geolocation heuristics")
        return None


class GeolocationResolver:
    def __init__(self, url: str = GEO_API_URL, timeout: float = DEFAULT_GEO_TIMEOUT, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or new_session()

    def resolve(self) -> Optional[GeoInfo]:
        try:
            res = self.session.get(self.url, timeout=self.timeout)
            res.raise_for_status()
            geo = GeoInfo.model_validate(res.json())
        except requests.RequestException as e:
            logger.warning(f"Geolocation query failed: {e}")
            return None
        except (ValueError, ValidationError) as e:
            logger.warning(f"Geolocation response unusable: {e}")
            return None

        if geo.status is not GeoStatus.SUCCESS:
            logger.warning(f"Geolocation service reported failure for {geo.ip}")
            return None
        return geo
