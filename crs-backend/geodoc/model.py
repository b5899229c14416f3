from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from app.crs.model import ABSENT, CrsSpec
from geodoc.errors import FeatureError


class GeometryType(str, Enum):
    POINT = "Point"
    LINE_STRING = "LineString"
    POLYGON = "Polygon"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    MULTI_POLYGON = "MultiPolygon"
    GEOMETRY_COLLECTION = "GeometryCollection"

    @classmethod
    def from_tag(cls, tag: Any) -> Optional["GeometryType"]:
        for g in cls:
            if g.value == tag:
                return g
        return None


PropertyValue = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class Feature:
    """One GeoJSON feature.

    ``geometry`` is the raw geometry object, passed through untouched;
    ``properties`` keeps the input key order.
    """

    geometry_type: GeometryType
    geometry: Dict[str, Any]
    properties: Dict[str, PropertyValue] = field(default_factory=dict)
    feature_id: Optional[Union[str, int, float]] = None


@dataclass(frozen=True)
class GeoJsonDocument:
    """A FeatureCollection with its declared CRS. Never mutated after construction."""

    crs: CrsSpec = ABSENT
    features: Tuple[Feature, ...] = ()
    name: Optional[str] = None

    def __post_init__(self) -> None:
        # accept any sequence, store a tuple
        if not isinstance(self.features, tuple):
            object.__setattr__(self, "features", tuple(self.features))

    def geometry_types(self) -> List[GeometryType]:
        """Distinct geometry types in first-seen order."""
        return list(dict.fromkeys(f.geometry_type for f in self.features))


def _non_finite(value: Any) -> bool:
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, (list, tuple)):
        return any(_non_finite(v) for v in value)
    if isinstance(value, dict):
        return any(_non_finite(v) for v in value.values())
    return False


def _is_scalar(v: Any) -> bool:
    if v is None or isinstance(v, (str, bool, int)):
        return True
    if isinstance(v, float):
        return math.isfinite(v)
    return False


def validate_feature(feature: Feature, index: Optional[int] = None) -> Optional[FeatureError]:
    """Return None when the feature is valid, else a FeatureError with every reason found."""
    reasons: List[str] = []

    gtype = feature.geometry_type
    if not isinstance(gtype, GeometryType):
        reasons.append(f"unsupported geometry type {gtype!r}")

    geom = feature.geometry
    if not isinstance(geom, dict):
        reasons.append("geometry must be an object")
    else:
        tag = geom.get("type")
        if isinstance(gtype, GeometryType) and tag != gtype.value:
            reasons.append(f"geometry type tag {tag!r} does not match {gtype.value!r}")
        if gtype == GeometryType.GEOMETRY_COLLECTION:
            if not isinstance(geom.get("geometries"), list):
                reasons.append("GeometryCollection requires a 'geometries' array")
        elif "coordinates" not in geom:
            reasons.append("geometry has no 'coordinates' member")
        if _non_finite(geom):
            reasons.append("geometry contains a non-finite number")

    props = feature.properties
    if not isinstance(props, dict):
        reasons.append("properties must be a mapping")
    else:
        for k, v in props.items():
            if not isinstance(k, str):
                reasons.append(f"property key {k!r} is not a string")
            elif not _is_scalar(v):
                reasons.append(f"property {k!r} must be a string, number, boolean or null, got {type(v).__name__}")

    fid = feature.feature_id
    if fid is not None and (isinstance(fid, bool) or not isinstance(fid, (str, int, float))):
        reasons.append(f"feature id must be a string or number, got {type(fid).__name__}")

    if reasons:
        return FeatureError(index=index, reasons=reasons)
    return None


def validate_document(doc: GeoJsonDocument) -> List[FeatureError]:
    """Validate every feature; errors are collected, never short-circuited."""
    errors: List[FeatureError] = []
    for i, f in enumerate(doc.features):
        err = validate_feature(f, index=i)
        if err is not None:
            errors.append(err)
    return errors


__all__ = [
    "GeometryType",
    "PropertyValue",
    "Feature",
    "GeoJsonDocument",
    "validate_feature",
    "validate_document",
]
