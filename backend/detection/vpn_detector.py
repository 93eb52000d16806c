import logging
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from core.keywords import DEFAULT_KEYWORDS, KeywordTables, as_str_tuple
from core.models import GeoInfo, InterfaceSignal, ISPClassification, ProxyKind, VPNDecision
from .isp_classifier import classify_isp

logger = logging.getLogger("egresscheck.detection")

SIGNAL_IP_SPLIT = "ip-split"
SIGNAL_OVERSEAS = "overseas-ip"
SIGNAL_TUNNEL = "tunnel-interface"
SIGNAL_VPN_PROVIDER = "vpn-provider"
SIGNAL_DATACENTER = "datacenter"
SIGNAL_HOME_BROADBAND = "home-broadband"


class ScoringWeights(BaseModel):
    """Empirical point values; kept as-is until recalibrated against real data."""
    model_config = ConfigDict(frozen=True)

    ip_split: int = 50
    overseas_ip: int = 45
    tunnel_interface: int = 40
    vpn_provider: int = 35
    datacenter: int = 25
    home_broadband: int = -20
    vpn_threshold: int = 60
    confidence_ceiling: int = 95
    confidence_floor: int = 5


DEFAULT_WEIGHTS = ScoringWeights()


class VPNDetector:
    def __init__(
        self,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        keywords: KeywordTables = DEFAULT_KEYWORDS,
        home_country_code: str = "CN",
        home_country_names: Sequence[str] = ("China", "中国"),
    ):
        self.weights = weights
        self.keywords = keywords
        self.home_country_code = (home_country_code or "").upper()
        self.home_country_names = tuple(n.lower() for n in as_str_tuple(home_country_names) if n)

    def is_overseas(self, geo: GeoInfo) -> bool:
        """Checks whether the geolocated egress sits outside the home region"""
        code = (geo.country_code or "").upper()
        if code and code != self.home_country_code:
            return True
        country = (geo.country or "").lower()
        if country and not any(name in country for name in self.home_country_names):
            return True
        return False

    def decide(
        self,
        geo: GeoInfo,
        domestic_ip: Optional[str],
        interface: InterfaceSignal,
        isp: Optional[ISPClassification] = None,
    ) -> VPNDecision:
        """
        Additive point system over the collected observations.
        Returns: VPNDecision
        """
        w = self.weights
        if isp is None:
            isp = classify_isp(geo.isp, geo.org, self.keywords)

        points = 0
        is_proxy = False
        kind = ProxyKind.NONE
        signals = []

        # 1. Multi-source IP comparison
        if domestic_ip and domestic_ip != geo.ip:
            is_proxy = True
            kind = ProxyKind.SPLIT_TUNNEL
            points += w.ip_split
            signals.append(SIGNAL_IP_SPLIT)
        # 2. Geolocation fallback when no domestic baseline exists
        elif not domestic_ip and self.is_overseas(geo):
            is_proxy = True
            if kind is ProxyKind.NONE:
                kind = ProxyKind.GENERIC
            points += w.overseas_ip
            signals.append(SIGNAL_OVERSEAS)
            logger.debug(f"Overseas egress detected: {geo.country} {geo.ip}")

        # 3. Local tunnel adapter
        if interface.has_tunnel_interface:
            points += w.tunnel_interface
            signals.append(SIGNAL_TUNNEL)

        # 4. ISP analysis
        if isp.is_vpn_service:
            points += w.vpn_provider
            signals.append(SIGNAL_VPN_PROVIDER)
        elif isp.is_data_center:
            points += w.datacenter
            signals.append(SIGNAL_DATACENTER)

        # 5. Residential lines lower the likelihood
        if isp.is_home_broadband and not isp.is_data_center:
            points += w.home_broadband
            signals.append(SIGNAL_HOME_BROADBAND)

        confidence = isp.base_confidence
        if points > 0:
            confidence = min(w.confidence_ceiling, confidence + points)
        else:
            confidence = max(w.confidence_floor, confidence)
        confidence = max(0, min(100, confidence))

        is_vpn = points >= w.vpn_threshold

        # Split traffic plus a live tunnel adapter is a VPN
        if is_proxy and interface.has_tunnel_interface:
            is_vpn = True
            kind = ProxyKind.VPN
            confidence = min(w.confidence_ceiling, confidence)

        logger.debug(f"VPN decision: points={points} confidence={confidence} signals={signals}")

        return VPNDecision(
            is_vpn=is_vpn,
            is_proxy=is_proxy,
            proxy_kind=kind,
            confidence=confidence,
            signals=tuple(signals),
        )
