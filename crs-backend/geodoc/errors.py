from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class GeoJsonError(ValueError):
    """Base class for every failure raised by the GeoJSON pipeline."""

    kind = "geojson_error"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "error": str(self)}


class ParseError(GeoJsonError):
    """Malformed JSON or a top-level object that is not a FeatureCollection."""

    kind = "parse_error"

    def __init__(self, reason: str, position: Optional[int] = None):
        self.reason = reason
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"{reason}{where}")

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["position"] = self.position
        return d


class MalformedCrs(GeoJsonError):
    """A crs member is present but is neither the named nor the EPSG shape."""

    kind = "malformed_crs"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"malformed crs member: {reason}")


@dataclass(frozen=True)
class FeatureError:
    index: Optional[int]
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "reasons": list(self.reasons)}


class InvalidFeature(GeoJsonError):
    """One or more features failed validation; carries every collected error."""

    kind = "invalid_feature"

    def __init__(self, errors: List[FeatureError]):
        self.errors = list(errors)
        n = len(self.errors)
        first = self.errors[0] if self.errors else None
        summary = f"{n} invalid feature(s)"
        if first is not None and first.reasons:
            summary += f"; first at index {first.index}: {first.reasons[0]}"
        super().__init__(summary)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["errors"] = [e.to_dict() for e in self.errors]
        return d


__all__ = ["GeoJsonError", "ParseError", "MalformedCrs", "FeatureError", "InvalidFeature"]
