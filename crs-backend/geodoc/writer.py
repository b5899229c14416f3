from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from app.crs.model import serialize_crs_member
from geodoc.errors import FeatureError, InvalidFeature
from geodoc.model import Feature, GeoJsonDocument, validate_document

logger = logging.getLogger(__name__)


def _feature_obj(f: Feature) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": "Feature"}
    if f.feature_id is not None:
        out["id"] = f.feature_id
    out["geometry"] = f.geometry
    out["properties"] = dict(f.properties)
    return out


def to_geojson_obj(doc: GeoJsonDocument) -> Dict[str, Any]:
    """Build the JSON object for a document, crs member included unless absent."""
    out: Dict[str, Any] = {"type": "FeatureCollection"}
    if doc.name is not None:
        out["name"] = doc.name
    crs_member = serialize_crs_member(doc.crs)
    if crs_member is not None:
        out["crs"] = crs_member
    out["features"] = [_feature_obj(f) for f in doc.features]
    return out


def write(doc: GeoJsonDocument, indent: Optional[int] = None) -> bytes:
    """Serialize a document to UTF-8 GeoJSON bytes.

    Member order is type, name, crs, features; features keep their stored
    order and properties their key order. ``read(write(doc)) == doc`` for any
    document produced by the reader.
    """
    errors = validate_document(doc)
    if errors:
        raise InvalidFeature(errors)
    obj = to_geojson_obj(doc)
    try:
        if indent is None:
            text = json.dumps(obj, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        else:
            text = json.dumps(obj, ensure_ascii=False, indent=indent, allow_nan=False)
    except (TypeError, ValueError) as e:
        # payload values json cannot represent strictly
        raise InvalidFeature([FeatureError(None, [str(e)])]) from e
    logger.debug("geojson write: %d feature(s), crs=%s", len(doc.features), doc.crs.kind)
    return text.encode("utf-8")


__all__ = ["write", "to_geojson_obj"]
