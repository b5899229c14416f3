from __future__ import annotations

from typing import Any, Dict, List, Optional, Literal
from pydantic import BaseModel, Field, ConfigDict, field_validator


class CrsDescription(BaseModel):
    """Resolved view of a document's crs member."""

    kind: Literal["name", "EPSG", "absent"]
    member: Optional[Dict[str, Any]] = Field(
        default=None, description="crs member exactly as written, null when omitted"
    )
    epsg: Optional[int] = Field(default=None, description="EPSG code the crs resolves to")
    label: Optional[str] = None
    is_default: bool = False
    name: Optional[str] = None
    code: Optional[int] = None


class DocumentSummary(BaseModel):
    name: Optional[str] = None
    feature_count: int = Field(ge=0)
    geometry_types: Dict[str, int] = Field(default_factory=dict)
    multi_geometry: bool = False
    property_keys: List[str] = Field(default_factory=list)
    crs: CrsDescription

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "sites",
                "feature_count": 2,
                "geometry_types": {"Point": 1, "Polygon": 1},
                "multi_geometry": True,
                "property_keys": ["id"],
                "crs": {
                    "kind": "EPSG",
                    "member": {"type": "EPSG", "properties": {"code": 4283}},
                    "epsg": 4283,
                    "label": "GDA94",
                    "is_default": False,
                    "code": 4283,
                },
            }
        }
    )


class RoundtripRequest(BaseModel):
    source: str = Field(description="GeoJSON text before conversion")
    converted: str = Field(description="GeoJSON text produced by the converter")

    @field_validator("source", "converted")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v


class Issue(BaseModel):
    field: str
    observed_source: Any = None
    observed_converted: Any = None
    severity: Literal["critical", "warning"]


class PatchEntry(BaseModel):
    field: str
    new_value: Any = None
    rationale: Optional[str] = None


class ConsistencyReport(BaseModel):
    issues: List[Issue] = Field(default_factory=list)
    suggested_patch: List[PatchEntry] = Field(default_factory=list)


class CrsParseRequest(BaseModel):
    crs: Optional[Dict[str, Any]] = Field(default=None, description="raw crs member; null for none")
