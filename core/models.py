from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class GeoStatus(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"


class ProxyKind(str, Enum):
    NONE = "none"
    SPLIT_TUNNEL = "splitTunnel"
    GENERIC = "generic"
    VPN = "vpn"

    @property
    def display_name(self) -> str:
        return PROXY_KIND_DISPLAY[self]


PROXY_KIND_DISPLAY = {
    ProxyKind.NONE: "none",
    ProxyKind.SPLIT_TUNNEL: "split-tunnel proxy",
    ProxyKind.GENERIC: "proxy",
    ProxyKind.VPN: "VPN",
}


# --- OBSERVATIONS ---

class GeoInfo(BaseModel):
    """Geolocation of the internationally visible egress address.

    Field aliases follow the ip-api.com JSON shape, so a raw response can be
    fed to ``GeoInfo.model_validate`` directly.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ip: str = Field(alias="query")
    country_code: Optional[str] = Field(default="", alias="countryCode")
    country: Optional[str] = ""
    region: Optional[str] = Field(default="", alias="regionName")
    city: Optional[str] = ""
    isp: Optional[str] = ""
    org: Optional[str] = ""
    as_info: Optional[str] = Field(default="", alias="as")
    status: GeoStatus = GeoStatus.SUCCESS


class InterfaceSignal(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_tunnel_interface: bool = False
    interface_name: Optional[str] = None


class ISPClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_data_center: bool = False
    is_home_broadband: bool = False
    is_vpn_service: bool = False
    base_confidence: int = Field(default=50, ge=0, le=100)


# --- DECISIONS ---

class VPNDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_vpn: bool = False
    is_proxy: bool = False
    proxy_kind: ProxyKind = ProxyKind.NONE
    confidence: int = Field(default=0, ge=0, le=100)
    signals: Tuple[str, ...] = ()

    @property
    def method_trace(self) -> str:
        return "+".join(self.signals) if self.signals else "direct"


class RiskAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    risk_score: int = Field(ge=0, le=100)
    risk_level: str  # LOW, MEDIUM, HIGH
    broadband_label: str  # home, non-home
    nativity_label: str  # native, non-native
    vpn_status_label: str
    vpn_confidence: int = Field(ge=0, le=100)
    vpn_method_trace: str


class EvaluationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str  # ok, no_data
    geo: Optional[GeoInfo] = None
    domestic_ip: Optional[str] = None
    interface: Optional[InterfaceSignal] = None
    isp: Optional[ISPClassification] = None
    decision: Optional[VPNDecision] = None
    assessment: Optional[RiskAssessment] = None

    @property
    def location_label(self) -> str:
        if not self.geo:
            return "unknown"
        parts = [p for p in (self.geo.country or "unknown", self.geo.city) if p]
        return " · ".join(parts)


# --- API REQUEST SCHEMAS ---

class AssessRequest(BaseModel):
    geo: GeoInfo
    domestic_ip: Optional[str] = None
    has_tunnel_interface: Optional[bool] = False


# --- API RESPONSE SCHEMAS ---

class DecisionResponse(BaseModel):
    is_vpn: bool
    is_proxy: bool
    proxy_kind: str
    confidence: int
    signals: list
    method_trace: str


class EvaluationResponse(BaseModel):
    status: str
    ip: Optional[str] = None
    domestic_ip: Optional[str] = None
    location: Optional[str] = None
    isp: Optional[str] = None
    risk_score: Optional[int] = 0
    risk_level: Optional[str] = "LOW"
    broadband_label: Optional[str] = "unknown"
    nativity_label: Optional[str] = "unknown"
    vpn_status_label: Optional[str] = "unknown"
    tunnel_interface: Optional[str] = None
    decision: Optional[DecisionResponse] = None


class GenericResponse(BaseModel):
    status: str
    message: Optional[str] = None
