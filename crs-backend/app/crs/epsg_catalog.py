from __future__ import annotations

import re
from typing import Dict, Optional

# Minimal catalog of codes commonly seen in GeoJSON crs members; labels only
KNOWN_EPSG: Dict[int, str] = {
    4326: "WGS 84",
    4258: "ETRS89",
    4267: "NAD27",
    4269: "NAD83",
    4283: "GDA94",
    7844: "GDA2020",
    4230: "ED50",
    3857: "WGS 84 / Pseudo-Mercator",
    27700: "OSGB36 / British National Grid",
    2193: "NZGD2000 / New Zealand Transverse Mercator 2000",
}

# OGC names that denote a specific EPSG code (axis order aside)
OGC_ALIASES: Dict[str, int] = {
    "urn:ogc:def:crs:ogc:1.3:crs84": 4326,
    "urn:ogc:def:crs:ogc::crs84": 4326,
    "http://www.opengis.net/def/crs/ogc/1.3/crs84": 4326,
    "crs84": 4326,
}

_URN_EPSG_RE = re.compile(r"^urn:ogc:def:crs:epsg:[\d.]*:(\d+)$", re.IGNORECASE)
_HTTP_EPSG_RE = re.compile(r"^https?://www\.opengis\.net/def/crs/epsg/[\d.]+/(\d+)$", re.IGNORECASE)
_SHORT_EPSG_RE = re.compile(r"^epsg:(\d+)$", re.IGNORECASE)


def urn_for_epsg(code: int) -> str:
    return f"urn:ogc:def:crs:EPSG::{int(code)}"


def epsg_from_name(name: str) -> Optional[int]:
    """Resolve an OGC URN, opengis URL or ``EPSG:n`` string to its EPSG code."""
    s = (name or "").strip()
    alias = OGC_ALIASES.get(s.lower())
    if alias is not None:
        return alias
    for rx in (_URN_EPSG_RE, _HTTP_EPSG_RE, _SHORT_EPSG_RE):
        m = rx.match(s)
        if m:
            code = int(m.group(1))
            return code if code > 0 else None
    return None


def epsg_label(code: Optional[int]) -> Optional[str]:
    if code is None:
        return None
    return KNOWN_EPSG.get(int(code))


__all__ = ["KNOWN_EPSG", "OGC_ALIASES", "urn_for_epsg", "epsg_from_name", "epsg_label"]
