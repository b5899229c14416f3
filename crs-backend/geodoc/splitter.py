from __future__ import annotations

import copy
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from geodoc.model import Feature, GeoJsonDocument, GeometryType


def _detached(f: Feature) -> Feature:
    # outputs own their payloads; no dict is shared with the source document
    return replace(f, geometry=copy.deepcopy(f.geometry), properties=dict(f.properties))


def select_geometry_type(doc: GeoJsonDocument, geometry_type: GeometryType) -> GeoJsonDocument:
    """Document holding only features of ``geometry_type``; empty (same crs) when none match."""
    gtype = GeometryType(geometry_type)
    return replace(doc, features=tuple(_detached(f) for f in doc.features if f.geometry_type == gtype))


def split_by_geometry_type(
    doc: GeoJsonDocument,
    types: Optional[Iterable[GeometryType]] = None,
) -> Dict[GeometryType, GeoJsonDocument]:
    """Partition a document into homogeneous documents keyed by geometry type.

    Keys follow first-seen order; each output keeps the relative feature order
    and the source crs and name. With ``types`` only those types are returned,
    each present even when it has no features.
    """
    buckets: Dict[GeometryType, List[Feature]] = {}
    if types is not None:
        for t in types:
            buckets.setdefault(GeometryType(t), [])
    for f in doc.features:
        if types is None:
            buckets.setdefault(f.geometry_type, []).append(_detached(f))
        elif f.geometry_type in buckets:
            buckets[f.geometry_type].append(_detached(f))
    return {t: replace(doc, features=tuple(fs)) for t, fs in buckets.items()}


__all__ = ["split_by_geometry_type", "select_geometry_type"]
