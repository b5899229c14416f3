"""CRS (Coordinate Reference System) handling for GeoJSON documents.

Modules:
 - model: CrsSpec variants and the crs member parse/serialize pair
 - epsg_catalog: well-known EPSG codes and OGC URN helpers
 - diagnostics: JSON descriptions and equivalence checks
"""

__all__ = [
    "diagnostics",
    "epsg_catalog",
    "model",
]
