from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from geodoc.errors import MalformedCrs


class CrsSpec:
    """Base of the three crs variants. Instances are immutable values."""

    kind = "abstract"

    @property
    def is_absent(self) -> bool:
        return False


@dataclass(frozen=True)
class NamedCrs(CrsSpec):
    name: str
    kind = "name"

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise MalformedCrs("named crs requires a non-empty 'name' string")


@dataclass(frozen=True)
class EpsgCrs(CrsSpec):
    code: int
    kind = "EPSG"

    def __post_init__(self) -> None:
        # bool is an int subclass; reject it explicitly
        if isinstance(self.code, bool) or not isinstance(self.code, int) or self.code <= 0:
            raise MalformedCrs(f"EPSG crs requires a positive integer 'code', got {self.code!r}")


@dataclass(frozen=True)
class AbsentCrs(CrsSpec):
    kind = "absent"

    @property
    def is_absent(self) -> bool:
        return True


ABSENT = AbsentCrs()

CRS84_URN = "urn:ogc:def:crs:OGC:1.3:CRS84"


def parse_crs_member(raw: Any = None) -> CrsSpec:
    """Resolve the value of a top-level ``crs`` member.

    ``None`` stands for both a missing member and an explicit JSON null and
    yields ``ABSENT``. Accepted shapes::

        {"type": "name", "properties": {"name": "urn:ogc:def:crs:OGC:1.3:CRS84"}}
        {"type": "EPSG", "properties": {"code": 4283}}

    Anything else raises MalformedCrs.
    """
    if raw is None:
        return ABSENT
    if not isinstance(raw, dict):
        raise MalformedCrs(f"expected an object, got {type(raw).__name__}")
    ctype = raw.get("type")
    props = raw.get("properties")
    if ctype not in ("name", "EPSG"):
        raise MalformedCrs(f"unsupported crs type {ctype!r}")
    if not isinstance(props, dict):
        raise MalformedCrs(f"crs of type {ctype!r} is missing its 'properties' object")
    if ctype == "name":
        return NamedCrs(props.get("name"))  # type: ignore[arg-type]
    return EpsgCrs(props.get("code"))  # type: ignore[arg-type]


def serialize_crs_member(crs: CrsSpec) -> Optional[Dict[str, Any]]:
    """Return the JSON value for the crs member, or None when it must be omitted."""
    if isinstance(crs, NamedCrs):
        return {"type": "name", "properties": {"name": crs.name}}
    if isinstance(crs, EpsgCrs):
        return {"type": "EPSG", "properties": {"code": crs.code}}
    if isinstance(crs, AbsentCrs):
        return None
    raise TypeError(f"not a CrsSpec: {crs!r}")


__all__ = [
    "CrsSpec",
    "NamedCrs",
    "EpsgCrs",
    "AbsentCrs",
    "ABSENT",
    "CRS84_URN",
    "parse_crs_member",
    "serialize_crs_member",
]
