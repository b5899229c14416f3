from __future__ import annotations

from typing import Any, Dict, List

from app.crs.diagnostics import describe_crs
from geodoc.model import GeoJsonDocument


def property_keys(doc: GeoJsonDocument) -> List[str]:
    """Union of property keys across features, first-seen order."""
    keys: Dict[str, None] = {}
    for f in doc.features:
        for k in f.properties:
            keys.setdefault(k, None)
    return list(keys)


def summarize_document(doc: GeoJsonDocument) -> Dict[str, Any]:
    """Small summary of a document for display and caching.

    {
        'name': 'roads',
        'feature_count': 3,
        'geometry_types': {'Point': 2, 'Polygon': 1},
        'multi_geometry': True,
        'property_keys': ['id', 'label'],
        'crs': {...describe_crs...},
    }
    """
    counts: Dict[str, int] = {}
    for f in doc.features:
        counts[f.geometry_type.value] = counts.get(f.geometry_type.value, 0) + 1
    return {
        "name": doc.name,
        "feature_count": len(doc.features),
        "geometry_types": counts,
        "multi_geometry": len(counts) > 1,
        "property_keys": property_keys(doc),
        "crs": describe_crs(doc.crs),
    }


__all__ = ["summarize_document", "property_keys"]
