import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from colorama import Fore, Style, init
from pydantic import ValidationError

from agent.interfaces import TUNNEL_INTERFACE_KEYWORDS, scan_interfaces
from agent.probes import (
    DEFAULT_DOMESTIC_ENDPOINTS,
    DEFAULT_GEO_TIMEOUT,
    DEFAULT_PROBE_TIMEOUT,
    GEO_API_URL,
    DomesticEgressResolver,
    GeolocationResolver,
    ProbeEndpoint,
    new_session,
)
from backend.detection.isp_classifier import classify_isp
from backend.detection.risk_engine import RiskEngine
from backend.detection.vpn_detector import DEFAULT_WEIGHTS, ScoringWeights, VPNDetector
from core.keywords import as_str_tuple, load_keyword_tables
from core.models import EvaluationResult, GeoInfo, InterfaceSignal

init(autoreset=True)

logger = logging.getLogger("egresscheck.agent")

# =========================================================
# EGRESS AGENT
# =========================================================

class EgressAgent:

    def __init__(self, config_path="core/config.json", config=None):
        self.config = config if config is not None else self._load_config(config_path)

        self.geo_api_url = self.config.get("geo_api_url", GEO_API_URL)
        self.geo_timeout = float(self.config.get("geo_timeout", DEFAULT_GEO_TIMEOUT))
        self.probe_timeout = float(self.config.get("probe_timeout", DEFAULT_PROBE_TIMEOUT))
        self.endpoints = self._build_endpoints(self.config.get("domestic_endpoints"))
        self.tunnel_keywords = self._str_list("tunnel_keywords", TUNNEL_INTERFACE_KEYWORDS)

        self.keywords = load_keyword_tables(self.config.get("keywords_path"))
        self.weights = self._build_weights(self.config.get("weights"))

        self.vpn_detector = VPNDetector(
            weights=self.weights,
            keywords=self.keywords,
            home_country_code=self.config.get("home_country_code", "CN"),
            home_country_names=self._str_list("home_country_names", ("China", "中国")),
        )
        self.risk_engine = RiskEngine(keywords=self.keywords)

    def _load_config(self, path):
        if not path or not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read config {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Config {path} is not a JSON object, using defaults")
            return {}
        return data

    def _str_list(self, key, default):
        raw = self.config.get(key)
        if raw is None:
            return tuple(default)
        try:
            return as_str_tuple(raw)
        except TypeError as e:
            logger.warning(f"Ignoring config {key}: {e}")
            return tuple(default)

    def _build_endpoints(self, raw):
        if not raw:
            if self.probe_timeout == DEFAULT_PROBE_TIMEOUT:
                return DEFAULT_DOMESTIC_ENDPOINTS
            return tuple(ProbeEndpoint(url=e.url, timeout=self.probe_timeout) for e in DEFAULT_DOMESTIC_ENDPOINTS)

        if isinstance(raw, (str, dict)):
            raw = [raw]
        elif not isinstance(raw, (list, tuple)):
            logger.warning(f"Ignoring domestic_endpoints of type {type(raw).__name__}, using defaults")
            return self._build_endpoints(None)

        endpoints = []
        for item in raw:
            try:
                if isinstance(item, str):
                    endpoints.append(ProbeEndpoint(url=item, timeout=self.probe_timeout))
                else:
                    endpoints.append(ProbeEndpoint(**{"timeout": self.probe_timeout, **item}))
            except (TypeError, ValidationError) as e:
                logger.warning(f"Skipping invalid probe endpoint {item!r}: {e}")
        return tuple(endpoints)

    def _build_weights(self, raw) -> ScoringWeights:
        if not raw:
            return DEFAULT_WEIGHTS
        try:
            return ScoringWeights(**{**DEFAULT_WEIGHTS.model_dump(), **raw})
        except (TypeError, ValidationError) as e:
            logger.warning(f"Ignoring invalid scoring weights: {e}")
            return DEFAULT_WEIGHTS

    # ======================== PIPELINE =======================

    def assess(self, geo: GeoInfo, domestic_ip: Optional[str], interface: InterfaceSignal) -> EvaluationResult:
        """Pure decision path over already-collected observations."""
        isp = classify_isp(geo.isp, geo.org, self.keywords)
        decision = self.vpn_detector.decide(geo, domestic_ip, interface, isp)
        assessment = self.risk_engine.assess(geo, decision, isp)

        return EvaluationResult(
            status="ok",
            geo=geo,
            domestic_ip=domestic_ip,
            interface=interface,
            isp=isp,
            decision=decision,
            assessment=assessment,
        )

    def evaluate(self) -> EvaluationResult:
        """
        Probes geolocation and domestic egress concurrently, then scores.
        Returns: EvaluationResult (status "no_data" when geolocation fails)
        """
        with new_session() as geo_session, new_session() as probe_session:
            geo_resolver = GeolocationResolver(url=self.geo_api_url, timeout=self.geo_timeout, session=geo_session)
            domestic_resolver = DomesticEgressResolver(endpoints=self.endpoints, session=probe_session)

            with ThreadPoolExecutor(max_workers=2) as pool:
                geo_future = pool.submit(geo_resolver.resolve)
                domestic_future = pool.submit(domestic_resolver.resolve)
                geo = geo_future.result()
                domestic_ip = domestic_future.result()

        interface = scan_interfaces(self.tunnel_keywords)

        if geo is None:
            logger.warning("No geolocation data; evaluation skipped")
            return EvaluationResult(status="no_data", domestic_ip=domestic_ip, interface=interface)

        result = self.assess(geo, domestic_ip, interface)
        logger.info(
            f"Evaluated {geo.ip}: risk={result.assessment.risk_score} "
            f"vpn={result.assessment.vpn_status_label} trace={result.assessment.vpn_method_trace}"
        )
        return result


# ======================== CONSOLE ========================

def _risk_color(level):
    if level == "HIGH": return Fore.RED
    if level == "MEDIUM": return Fore.YELLOW
    return Fore.GREEN


def format_report(result: EvaluationResult) -> str:
    if result.status != "ok":
        return f"{Fore.RED}[X] Unable to fetch IP data{Style.RESET_ALL}"

    geo, a, d = result.geo, result.assessment, result.decision
    proxied = d.is_vpn or d.is_proxy
    status_color = Fore.GREEN if proxied else Style.DIM
    status_text = a.vpn_status_label if (d.is_proxy and not d.is_vpn) else f"VPN {a.vpn_status_label}"

    lines = [
        f"{Fore.BLUE}{'=' * 60}",
        f"{status_color}{status_text}{Style.RESET_ALL}",
        f"{Style.BRIGHT}{geo.ip}{Style.RESET_ALL}",
        f"{result.location_label}",
        f"{Style.DIM}{geo.isp or 'unknown network'}{Style.RESET_ALL}",
        (
            f"{a.nativity_label} · {a.broadband_label} · "
            f"{_risk_color(a.risk_level)}{a.risk_score}% risk{Style.RESET_ALL}"
        ),
        f"{Style.DIM}domestic egress: {result.domestic_ip or '-'} | trace: {a.vpn_method_trace} "
        f"| confidence: {a.vpn_confidence}%{Style.RESET_ALL}",
    ]
    if result.interface and result.interface.interface_name:
        lines.append(f"{Style.DIM}tunnel interface: {result.interface.interface_name}{Style.RESET_ALL}")
    lines.append(f"{Fore.BLUE}{'=' * 60}")
    return "\n".join(lines)


if __name__ == "__main__":
    print(format_report(EgressAgent("core/config.json").evaluate()))
