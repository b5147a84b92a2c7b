"""Services exports."""
from cadastral_exporter.services.projection import web_mercator_to_wgs84
from cadastral_exporter.services.envelope import Envelope, calculate_envelope
from cadastral_exporter.services.wkb import encode_wkb, encode_gpkg, read_gpkg_blob
from cadastral_exporter.services.reprojection import reproject_geometry, reproject_geojson_geometry
from cadastral_exporter.services.extractor import extract_feature, extract_geometry
from cadastral_exporter.services.geopackage import GeoPackageWriter
from cadastral_exporter.services.exporter import (
    ExportStats,
    export_geojson,
    export_geopackage,
    transform_row_to_feature,
    transform_row_to_gpkg,
)

__all__ = [
    "web_mercator_to_wgs84",
    "Envelope",
    "calculate_envelope",
    "encode_wkb",
    "encode_gpkg",
    "read_gpkg_blob",
    "reproject_geometry",
    "reproject_geojson_geometry",
    "extract_feature",
    "extract_geometry",
    "GeoPackageWriter",
    "ExportStats",
    "export_geojson",
    "export_geopackage",
    "transform_row_to_feature",
    "transform_row_to_gpkg",
]
