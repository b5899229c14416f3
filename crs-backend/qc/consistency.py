from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List

from app.crs.diagnostics import crs_equivalent, describe_crs
from app.crs.model import AbsentCrs, CrsSpec, serialize_crs_member
from geodoc.model import GeoJsonDocument

logger = logging.getLogger(__name__)


def _type_histogram(doc: GeoJsonDocument) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for f in doc.features:
        counts[f.geometry_type.value] = counts.get(f.geometry_type.value, 0) + 1
    return counts


def check_crs_roundtrip(source: GeoJsonDocument, converted: GeoJsonDocument) -> dict:
    """Compare a source document with the output of an external conversion.

    Severity logic:
    - critical: crs dropped or replaced by a different CRS, feature count changed
    - warning: crs re-expressed in another (equivalent) shape, geometry types changed

    Returns a dict with 'issues' and 'suggested_patch'.
    """
    issues: List[dict] = []
    patch: List[dict] = []

    # 1) CRS
    src, dst = source.crs, converted.crs
    if src != dst:
        if isinstance(dst, AbsentCrs):
            severity = "critical"
            rationale = "crs member dropped by conversion"
            # absent means CRS84, equivalent only when the source said so too
            if crs_equivalent(src, dst):
                severity = "warning"
            logger.warning("crs dropped during conversion (source=%s)", src.kind)
        elif crs_equivalent(src, dst):
            severity = "warning"
            rationale = "crs re-expressed in an equivalent shape"
        else:
            severity = "critical"
            rationale = "crs changed by conversion"
        issues.append(
            {
                "field": "crs",
                "observed_source": describe_crs(src),
                "observed_converted": describe_crs(dst),
                "severity": severity,
            }
        )
        patch.append(
            {
                "field": "crs",
                "new_value": serialize_crs_member(src),
                "rationale": f"{rationale}; source declaration is authoritative",
            }
        )

    # 2) Feature count
    if len(source.features) != len(converted.features):
        issues.append(
            {
                "field": "feature_count",
                "observed_source": len(source.features),
                "observed_converted": len(converted.features),
                "severity": "critical",
            }
        )

    # 3) Geometry type histogram
    h_src, h_dst = _type_histogram(source), _type_histogram(converted)
    if h_src != h_dst:
        issues.append(
            {
                "field": "geometry_types",
                "observed_source": h_src,
                "observed_converted": h_dst,
                "severity": "warning",
            }
        )

    return {"issues": issues, "suggested_patch": patch}


def restore_crs(converted: GeoJsonDocument, crs: CrsSpec) -> GeoJsonDocument:
    """New document equal to ``converted`` but declaring ``crs``."""
    return replace(converted, crs=crs)


__all__ = ["check_crs_roundtrip", "restore_crs"]
