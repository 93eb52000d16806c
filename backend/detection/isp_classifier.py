from core.keywords import DEFAULT_KEYWORDS, KeywordTables, contains_any
from core.models import ISPClassification

BASE_CONFIDENCE = 50
DATA_CENTER_BONUS = 30
VPN_SERVICE_BONUS = 20
HOME_BROADBAND_PENALTY = 20


def classify_isp(isp, org, keywords: KeywordTables = DEFAULT_KEYWORDS) -> ISPClassification:
    """
    Categorizes an ISP/org pair by keyword containment.
    Returns: ISPClassification with a base confidence in [0, 100]
    """
    haystack = f"{isp or ''} {org or ''}".lower()

    is_data_center = contains_any(haystack, keywords.data_center)
    is_home_broadband = contains_any(haystack, keywords.home_broadband)
    is_vpn_service = contains_any(haystack, keywords.vpn_service)

    confidence = BASE_CONFIDENCE
    if is_data_center:
        confidence += DATA_CENTER_BONUS
    if is_vpn_service:
        confidence += VPN_SERVICE_BONUS
    if is_home_broadband and not is_data_center:
        confidence -= HOME_BROADBAND_PENALTY

    return ISPClassification(
        is_data_center=is_data_center,
        is_home_broadband=is_home_broadband,
        is_vpn_service=is_vpn_service,
        base_confidence=max(0, min(100, confidence)),
    )
