import math

from core.keywords import DEFAULT_KEYWORDS, KeywordTables, contains_any
from core.models import GeoInfo, ISPClassification, ProxyKind, RiskAssessment, VPNDecision

PROXY_CONFIDENCE_FACTOR = 0.5
DATA_CENTER_RISK = 20
HOME_BROADBAND_RELIEF = 15
HIGH_RISK_COUNTRY_RISK = 25
NON_NATIVE_THRESHOLD = 50


class RiskEngine:
    def __init__(self, keywords: KeywordTables = DEFAULT_KEYWORDS):
        self.keywords = keywords

    def assess(self, geo: GeoInfo, decision: VPNDecision, isp: ISPClassification) -> RiskAssessment:
        """
        Folds the VPN decision and ISP classification into one 0-100 risk value.
        Formula: confidence * 0.5 (if proxied) + 20 datacenter - 15 home + 25 high-risk country
        """
        risk = 0.0

        if decision.is_vpn or decision.is_proxy:
            risk += decision.confidence * PROXY_CONFIDENCE_FACTOR
        if isp.is_data_center:
            risk += DATA_CENTER_RISK
        if isp.is_home_broadband:
            risk -= HOME_BROADBAND_RELIEF
        if contains_any(geo.country, self.keywords.high_risk_countries):
            risk += HIGH_RISK_COUNTRY_RISK

        risk = max(0.0, min(100.0, risk))
        # Half-up rounding, not banker's
        score = int(math.floor(risk + 0.5))

        severity = "LOW"
        if score > 60: severity = "HIGH"
        elif score > 20: severity = "MEDIUM"

        if decision.is_vpn:
            status = "connected"
        elif decision.proxy_kind is not ProxyKind.NONE:
            status = decision.proxy_kind.display_name
        else:
            status = "not connected"

        return RiskAssessment(
            risk_score=score,
            risk_level=severity,
            broadband_label="home" if isp.is_home_broadband else "non-home",
            nativity_label="non-native" if score >= NON_NATIVE_THRESHOLD else "native",
            vpn_status_label=status,
            vpn_confidence=decision.confidence,
            vpn_method_trace=decision.method_trace,
        )

