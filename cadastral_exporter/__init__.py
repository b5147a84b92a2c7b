"""Cadastral parcel exporter: PostgreSQL to GeoPackage and WGS84 GeoJSON."""

__version__ = "0.1.0"
