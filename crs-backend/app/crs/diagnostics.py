from __future__ import annotations

from typing import Any, Dict, Optional

from .epsg_catalog import epsg_from_name, epsg_label
from .model import AbsentCrs, CrsSpec, EpsgCrs, NamedCrs, serialize_crs_member


def resolved_epsg(crs: CrsSpec) -> Optional[int]:
    """EPSG code a crs stands for; None for absent or unrecognised names."""
    if isinstance(crs, EpsgCrs):
        return crs.code
    if isinstance(crs, NamedCrs):
        return epsg_from_name(crs.name)
    return None


def crs_equivalent(a: CrsSpec, b: CrsSpec) -> bool:
    """True when both declare the same CRS, possibly in different shapes.

    An absent crs means the GeoJSON default (CRS84), so it is equivalent to an
    explicit CRS84 / EPSG:4326 declaration.
    """
    if a == b:
        return True
    ea = 4326 if isinstance(a, AbsentCrs) else resolved_epsg(a)
    eb = 4326 if isinstance(b, AbsentCrs) else resolved_epsg(b)
    return ea is not None and ea == eb


def describe_crs(crs: CrsSpec) -> Dict[str, Any]:
    code = resolved_epsg(crs)
    out: Dict[str, Any] = {
        "kind": crs.kind,
        "member": serialize_crs_member(crs),
        "epsg": code,
        "label": epsg_label(code),
        "is_default": isinstance(crs, AbsentCrs),
    }
    if isinstance(crs, NamedCrs):
        out["name"] = crs.name
    if isinstance(crs, EpsgCrs):
        out["code"] = crs.code
    if isinstance(crs, AbsentCrs):
        # no member means the GeoJSON default, longitude/latitude on WGS 84
        out["label"] = "CRS84 (default)"
    return out


__all__ = ["resolved_epsg", "crs_equivalent", "describe_crs"]
