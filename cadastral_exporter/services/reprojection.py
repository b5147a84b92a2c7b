"""Reprojection of stored Web Mercator geometries to WGS84 GeoJSON."""
import math
from typing import Any, Mapping

from cadastral_exporter.exceptions import NonFiniteProjection
from cadastral_exporter.schemas.geometry import Geometry, parse_geometry
from cadastral_exporter.services.projection import web_mercator_to_wgs84


def _project_finite(x: float, y: float) -> tuple[float, float]:
    lon, lat = web_mercator_to_wgs84(x, y)
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise NonFiniteProjection(f"projection of ({x!r}, {y!r}) is not finite: ({lon!r}, {lat!r})")
    return lon, lat


def reproject_geometry(geometry: Geometry) -> Geometry:
    """Return a WGS84 copy of a Web Mercator geometry, same type and shape."""
    return geometry.map_positions(_project_finite)


def reproject_geojson_geometry(raw: Mapping[str, Any]) -> dict:
    """Reproject a raw GeoJSON geometry object to WGS84.

    Keys other than ``coordinates`` are kept, except ``crs``: plain GeoJSON
    is WGS84 by definition.

    Raises:
        UnsupportedGeometryType, MalformedCoordinates, MissingField: from decoding.
        NonFiniteProjection: a projected coordinate is NaN or infinite.
    """
    projected = reproject_geometry(parse_geometry(raw)).to_geojson()
    result = {key: value for key, value in raw.items() if key != "crs"}
    result["coordinates"] = projected["coordinates"]
    return result
