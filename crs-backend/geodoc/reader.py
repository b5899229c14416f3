"""Parse GeoJSON FeatureCollection text into a GeoJsonDocument.

Pure function over an in-memory buffer: no filesystem or network access.
The top-level ``crs`` member is resolved through ``parse_crs_member``; a
missing member is not an error, a malformed one is.
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Optional, Tuple, Union

from app.crs.model import parse_crs_member
from geodoc.errors import FeatureError, InvalidFeature, ParseError
from geodoc.model import Feature, GeoJsonDocument, GeometryType, validate_feature

logger = logging.getLogger(__name__)


class _DuplicateKeyDict(dict):
    duplicate_keys: Tuple[str, ...] = ()


def _pairs_hook(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    d = dict(pairs)
    if len(d) == len(pairs):
        return d
    seen = set()
    dups = []
    for k, _ in pairs:
        if k in seen and k not in dups:
            dups.append(k)
        seen.add(k)
    out = _DuplicateKeyDict(d)
    out.duplicate_keys = tuple(dups)
    return out


# members whose repetition would silently shadow a declaration
_SINGLE_MEMBERS = ("type", "name", "crs", "features")


def _reject_constant(name: str) -> Any:
    raise ParseError(f"non-finite number {name} is not valid JSON")


def _parse_float(s: str) -> float:
    v = float(s)
    if not math.isfinite(v):
        raise ParseError(f"number {s} overflows a double")
    return v


def _decode(text: Union[bytes, bytearray, str]) -> str:
    if isinstance(text, str):
        return text
    try:
        return bytes(text).decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"input is not valid UTF-8: {e.reason}", position=e.start) from e


def _load(text: str) -> Any:
    try:
        return json.loads(text, object_pairs_hook=_pairs_hook, parse_constant=_reject_constant, parse_float=_parse_float)
    except ParseError:
        raise
    except json.JSONDecodeError as e:
        raise ParseError(e.msg, position=e.pos) from e
    except RecursionError as e:
        raise ParseError("JSON nesting too deep") from e
    except ValueError as e:
        # e.g. integer literals past the interpreter digit limit
        raise ParseError(str(e)) from e


def _read_feature(raw: Any, index: int) -> Tuple[Optional[Feature], Optional[FeatureError]]:
    if not isinstance(raw, dict):
        return None, FeatureError(index, [f"feature must be an object, got {type(raw).__name__}"])
    reasons: List[str] = []
    if raw.get("type") != "Feature":
        reasons.append(f"expected type 'Feature', got {raw.get('type')!r}")

    geom = raw.get("geometry")
    gtype: Optional[GeometryType] = None
    if geom is None:
        reasons.append("feature has no geometry")
    elif not isinstance(geom, dict):
        reasons.append("geometry must be an object")
    else:
        gtype = GeometryType.from_tag(geom.get("type"))
        if gtype is None:
            reasons.append(f"unsupported geometry type {geom.get('type')!r}")

    props = raw.get("properties")
    if props is None:
        props = {}
    if not isinstance(props, dict):
        reasons.append("properties must be an object or null")
    else:
        for k in getattr(props, "duplicate_keys", ()):
            reasons.append(f"duplicate property key {k!r}")
        props = dict(props)

    if reasons:
        return None, FeatureError(index, reasons)

    feature = Feature(
        geometry_type=gtype,  # type: ignore[arg-type]
        geometry=geom,
        properties=props,
        feature_id=raw.get("id"),
    )
    return feature, validate_feature(feature, index=index)


def read(text: Union[bytes, bytearray, str]) -> GeoJsonDocument:
    """Parse GeoJSON text into a GeoJsonDocument.

    Raises:
      ParseError     malformed JSON or a top level that is not a FeatureCollection
      MalformedCrs   crs member present but not one of the two supported shapes
      InvalidFeature one or more features failed validation (all are reported)
    """
    obj = _load(_decode(text))
    if not isinstance(obj, dict):
        raise ParseError(f"top-level value must be an object, got {type(obj).__name__}", position=0)
    dups = [k for k in getattr(obj, "duplicate_keys", ()) if k in _SINGLE_MEMBERS]
    if dups:
        raise ParseError(f"duplicate top-level member(s): {', '.join(dups)}", position=0)
    if obj.get("type") != "FeatureCollection":
        raise ParseError(f"top-level type must be 'FeatureCollection', got {obj.get('type')!r}", position=0)
    raw_features = obj.get("features")
    if not isinstance(raw_features, list):
        raise ParseError("FeatureCollection requires a 'features' array", position=0)
    name = obj.get("name")
    if name is not None and not isinstance(name, str):
        raise ParseError("top-level 'name' must be a string", position=0)

    crs = parse_crs_member(obj.get("crs"))

    features: List[Feature] = []
    errors: List[FeatureError] = []
    for i, raw in enumerate(raw_features):
        feature, err = _read_feature(raw, i)
        if err is not None:
            errors.append(err)
        elif feature is not None:
            features.append(feature)
    if errors:
        logger.debug("geojson read rejected: %d invalid feature(s)", len(errors))
        raise InvalidFeature(errors)

    doc = GeoJsonDocument(crs=crs, features=tuple(features), name=name)
    logger.debug("geojson read: %d feature(s), crs=%s", len(features), crs.kind)
    return doc


__all__ = ["read"]
