import json
import logging
import os
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger("egresscheck.keywords")


class KeywordTables(BaseModel):
    """Static lookup tables used to classify ISP/org text and countries.

    Built once and passed into the classifiers so alternate lists can be
    injected (tests, regional deployments).
    """
    model_config = ConfigDict(frozen=True)

    data_center: Tuple[str, ...]
    home_broadband: Tuple[str, ...]
    high_risk_countries: Tuple[str, ...]
    vpn_service: Tuple[str, ...]


DEFAULT_KEYWORDS = KeywordTables(
    data_center=(
        "数据中心", "Amazon", "AWS", "Google", "Tencent", "Alibaba", "Cloudflare",
        "IDC", "DMIT", "Vultr", "DigitalOcean", "Linode", "OVH", "Data Center",
        "Hosting",
    ),
    home_broadband=(
        "电信", "移动", "联通", "宽带", "家庭", "住宅", "ChinaNet", "China Telecom",
        "China Unicom", "China Mobile", "Comcast", "Verizon", "Broadband",
    ),
    high_risk_countries=("俄罗斯", "印度", "乌克兰", "Russia", "India", "Ukraine"),
    vpn_service=("VPN", "Proxy", "Tunnel", "虚拟", "加速器", "节点"),
)


def contains_any(haystack: str, keywords) -> bool:
    hay = (haystack or "").lower()
    return any(k.lower() in hay for k in keywords if k)


def as_str_tuple(value) -> Tuple[str, ...]:
    """A lone string is one keyword, not a sequence of characters."""
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    raise TypeError(f"expected a string or a list of strings, got {type(value).__name__}")


def load_keyword_tables(path: Optional[str], base: KeywordTables = DEFAULT_KEYWORDS) -> KeywordTables:
    """Load keyword overrides from a JSON file.

    Keys absent from the file keep the values of ``base``. A missing path or a
    malformed file falls back to ``base``.
    """
    if not path or not os.path.exists(path):
        return base

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("keyword file must contain a JSON object")
        merged = base.model_dump()
        for key in merged:
            if key in data:
                merged[key] = as_str_tuple(data[key])
        return KeywordTables(**merged)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        logger.warning(f"Ignoring keyword file {path}: {e}")
        return base
