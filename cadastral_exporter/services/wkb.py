"""WKB and GeoPackage geometry blob encoding.

Blob layout written by encode_gpkg:

    offset  size  field
    0       1     magic 0x47
    1       1     version 0x00
    2       1     flags 0x01 (32-byte envelope present)
    3       4     SRS id, little-endian int32
    7       1     reserved 0x00
    8       32    envelope minX, maxX, minY, maxY (little-endian doubles)
    40      ...   WKB body

The WKB body is little-endian and carries no SRID. Polygons nested in a
MultiPolygon are written as ring count plus rings, without their own byte
order and type prefix.
"""
import struct
from typing import Any, Mapping, Optional, Union

from cadastral_exporter.exceptions import UnsupportedGeometryType
from cadastral_exporter.schemas.geometry import (
    GEOMETRY_TYPES,
    Geometry,
    MultiPolygon,
    parse_geometry,
)
from cadastral_exporter.services.envelope import Envelope, calculate_envelope

WEB_MERCATOR_SRS_ID = 3857

WKB_LITTLE_ENDIAN = 1
WKB_BIG_ENDIAN = 0
# Byte order flag plus geometry type code
WKB_HEADER_SIZE = 5

GPKG_MAGIC = 0x47
GPKG_VERSION = 0x00
GPKG_FLAG_ENVELOPE = 0x01
GPKG_HEADER_SIZE = 8
GPKG_ENVELOPE_SIZE = 32

_GPKG_HEADER = struct.Struct("<BBBiB")
_WKB_HEADER = struct.Struct("<BI")
_COUNT = struct.Struct("<I")
_POSITION = struct.Struct("<dd")

_WKB_CODES = {model.wkb_type: model for model in GEOMETRY_TYPES.values()}


def _pack_tree(buf: bytearray, tree: Any, depth: int) -> None:
    if depth == 0:
        buf += _POSITION.pack(tree[0], tree[1])
        return
    buf += _COUNT.pack(len(tree))
    for child in tree:
        _pack_tree(buf, child, depth - 1)


def encode_wkb(geometry: Union[Geometry, Mapping]) -> bytes:
    """Encode a geometry as little-endian WKB without SRID."""
    geometry = parse_geometry(geometry)
    buf = bytearray(_WKB_HEADER.pack(WKB_LITTLE_ENDIAN, geometry.wkb_type))

    if isinstance(geometry, MultiPolygon):
        buf += _COUNT.pack(len(geometry.coordinates))
        for polygon in geometry.polygons():
            buf += encode_wkb(polygon)[WKB_HEADER_SIZE:]
    else:
        _pack_tree(buf, geometry.coordinates, geometry.depth)
    return bytes(buf)


def build_gpkg_blob(wkb: bytes, envelope: Envelope, srs_id: int = WEB_MERCATOR_SRS_ID) -> bytes:
    """Prefix a WKB body with the GeoPackage header and envelope."""
    header = _GPKG_HEADER.pack(GPKG_MAGIC, GPKG_VERSION, GPKG_FLAG_ENVELOPE, srs_id, 0)
    return header + envelope.to_bytes() + wkb


def encode_gpkg(geometry: Union[Geometry, Mapping], srs_id: int = WEB_MERCATOR_SRS_ID) -> bytes:
    """Encode a geometry as a complete GeoPackage geometry blob.

    Raises:
        UnsupportedGeometryType: not a Point, LineString, Polygon or MultiPolygon.
        MalformedCoordinates: the coordinate tree has the wrong shape.
    """
    geometry = parse_geometry(geometry)
    wkb = encode_wkb(geometry)
    return build_gpkg_blob(wkb, calculate_envelope(geometry.coordinates), srs_id)


def read_gpkg_blob(blob: bytes) -> tuple[int, Optional[Envelope], bytes]:
    """Split a GeoPackage geometry blob into (srs_id, envelope, wkb).

    The envelope is None when the flags announce none.
    """
    if len(blob) < GPKG_HEADER_SIZE:
        raise ValueError("Invalid GPKG blob: too short")
    magic, version, flags, srs_id, _ = _GPKG_HEADER.unpack_from(blob)
    if magic != GPKG_MAGIC or version != GPKG_VERSION:
        raise ValueError(f"Invalid GPKG blob header: magic={magic:#x} version={version}")

    offset = GPKG_HEADER_SIZE
    envelope = None
    if flags == GPKG_FLAG_ENVELOPE:
        end = offset + GPKG_ENVELOPE_SIZE
        if len(blob) < end:
            raise ValueError("Invalid GPKG blob: truncated envelope")
        envelope = Envelope.from_bytes(blob[offset:end])
        offset = end
    elif flags != 0:
        raise ValueError(f"Unsupported GPKG envelope flags: {flags:#x}")
    return srs_id, envelope, blob[offset:]


def decode_wkb(wkb: bytes) -> Geometry:
    """Decode a WKB body as written by encode_wkb back into a Geometry."""
    if len(wkb) < WKB_HEADER_SIZE:
        raise ValueError("Invalid WKB: too short")
    if wkb[0] == WKB_LITTLE_ENDIAN:
        endian = "<"
    elif wkb[0] == WKB_BIG_ENDIAN:
        endian = ">"
    else:
        raise ValueError(f"Invalid WKB byte order: {wkb[0]}")

    geometry_type = struct.unpack_from(f"{endian}I", wkb, 1)[0]
    model = _WKB_CODES.get(geometry_type)
    if model is None:
        raise UnsupportedGeometryType(geometry_type)

    offset = WKB_HEADER_SIZE

    def read(depth: int) -> Any:
        nonlocal offset
        if depth == 0:
            x, y = struct.unpack_from(f"{endian}dd", wkb, offset)
            offset += 16
            return (x, y)
        count = struct.unpack_from(f"{endian}I", wkb, offset)[0]
        offset += 4
        return [read(depth - 1) for _ in range(count)]

    try:
        coordinates = read(model.depth)
    except struct.error as e:
        raise ValueError(f"Invalid WKB: truncated body ({e})") from e
    return model.model_construct(type=model.__name__, coordinates=coordinates)
