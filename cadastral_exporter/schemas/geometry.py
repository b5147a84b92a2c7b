"""Typed GeoJSON geometry variant.

Raw geometry objects are validated once, at the row boundary, into one of
Point, LineString, Polygon or MultiPolygon. Downstream code (envelope,
reprojection, WKB encoding) relies on the shape guarantees made here:
every position is a pair of finite floats, every ring and linestring has at
least one position, every polygon at least one ring and every multipolygon
at least one polygon.
"""
import math
from typing import Annotated, Any, Callable, ClassVar, Iterator, Literal, Mapping, Union

from pydantic import BaseModel, BeforeValidator, Field, ValidationError

from cadastral_exporter.exceptions import (
    MalformedCoordinates,
    MissingField,
    UnsupportedGeometryType,
)


def _to_position(value: Any) -> tuple[float, float]:
    """Coerce a GeoJSON position into an (x, y) float pair.

    Extra components (Z, M) are dropped. Booleans and strings are rejected.
    """
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise ValueError(f"position must have at least 2 components, got {value!r}")
    pair = []
    for component in value[:2]:
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            raise ValueError(f"coordinate must be a number, got {component!r}")
        try:
            component = float(component)
        except OverflowError:
            raise ValueError(f"coordinate out of range: {component!r}") from None
        if not math.isfinite(component):
            raise ValueError(f"coordinate must be finite, got {component!r}")
        pair.append(component)
    return pair[0], pair[1]


Position = Annotated[tuple[float, float], BeforeValidator(_to_position)]
Ring = Annotated[list[Position], Field(min_length=1)]
PolygonCoordinates = Annotated[list[Ring], Field(min_length=1)]


def map_positions(tree: Any, depth: int, fn: Callable[[float, float], tuple[float, float]]) -> Any:
    """Rebuild a coordinate tree with ``fn`` applied to every leaf position."""
    if depth == 0:
        return fn(tree[0], tree[1])
    return [map_positions(child, depth - 1, fn) for child in tree]


class BaseGeometry(BaseModel):
    """Behaviour shared by all supported geometry types."""

    # Nesting depth of the coordinate tree (0 for a single position)
    depth: ClassVar[int]
    # OGC WKB geometry type code
    wkb_type: ClassVar[int]

    type: str
    coordinates: Any

    def map_positions(self, fn: Callable[[float, float], tuple[float, float]]):
        """Return a geometry of the same type with every position mapped by ``fn``."""
        coordinates = map_positions(self.coordinates, self.depth, fn)
        return type(self).model_construct(type=self.type, coordinates=coordinates)

    def to_geojson(self) -> dict:
        """GeoJSON geometry object with plain nested lists."""
        return {
            "type": self.type,
            "coordinates": map_positions(self.coordinates, self.depth, lambda x, y: [x, y]),
        }


class Point(BaseGeometry):
    depth: ClassVar[int] = 0
    wkb_type: ClassVar[int] = 1

    type: Literal["Point"]
    coordinates: Position


class LineString(BaseGeometry):
    depth: ClassVar[int] = 1
    wkb_type: ClassVar[int] = 2

    type: Literal["LineString"]
    coordinates: Ring


class Polygon(BaseGeometry):
    depth: ClassVar[int] = 2
    wkb_type: ClassVar[int] = 3

    type: Literal["Polygon"]
    coordinates: PolygonCoordinates


class MultiPolygon(BaseGeometry):
    depth: ClassVar[int] = 3
    wkb_type: ClassVar[int] = 6

    type: Literal["MultiPolygon"]
    coordinates: Annotated[list[PolygonCoordinates], Field(min_length=1)]

    def polygons(self) -> Iterator[Polygon]:
        for coordinates in self.coordinates:
            yield Polygon.model_construct(type="Polygon", coordinates=coordinates)


Geometry = Union[Point, LineString, Polygon, MultiPolygon]

GEOMETRY_TYPES: dict[str, type[BaseGeometry]] = {
    "Point": Point,
    "LineString": LineString,
    "Polygon": Polygon,
    "MultiPolygon": MultiPolygon,
}


def parse_geometry(obj: Any) -> Geometry:
    """Validate a raw GeoJSON geometry object into a typed Geometry.

    Raises:
        MissingField: ``obj`` is not an object or has no coordinates.
        UnsupportedGeometryType: ``type`` is not one of GEOMETRY_TYPES.
        MalformedCoordinates: the coordinate tree has the wrong shape.
    """
    if isinstance(obj, BaseGeometry):
        if type(obj) not in GEOMETRY_TYPES.values():
            raise UnsupportedGeometryType(obj.type)
        return obj
    if not isinstance(obj, Mapping):
        raise MissingField("geometry", f"expected an object, got {type(obj).__name__}")

    geometry_type = obj.get("type")
    model = GEOMETRY_TYPES.get(geometry_type) if isinstance(geometry_type, str) else None
    if model is None:
        raise UnsupportedGeometryType(geometry_type)
    if obj.get("coordinates") is None:
        raise MissingField("coordinates")

    try:
        return model.model_validate({"type": geometry_type, "coordinates": obj["coordinates"]})
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise MalformedCoordinates(
            f"invalid {geometry_type} coordinates at {location}: {first['msg']}"
        ) from e
