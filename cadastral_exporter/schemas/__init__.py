"""Schema exports."""
from cadastral_exporter.schemas.geometry import (
    Geometry,
    Point,
    LineString,
    Polygon,
    MultiPolygon,
    parse_geometry,
)
from cadastral_exporter.schemas.cadastral import CadastralRow

__all__ = [
    "Geometry",
    "Point",
    "LineString",
    "Polygon",
    "MultiPolygon",
    "parse_geometry",
    "CadastralRow",
]
