"""Per-row pipelines and the export runs built on them.

Every row goes through a pure transform (extract, validate, then encode or
reproject). Row-scoped failures are logged and the row is skipped; the
overall extent is folded from the per-row envelopes by the run itself.
"""
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import BaseModel

from cadastral_exporter.exceptions import GeometryError, RowRejected
from cadastral_exporter.schemas.cadastral import CadastralRow
from cadastral_exporter.services.envelope import Envelope, calculate_envelope
from cadastral_exporter.services.extractor import extract_feature, extract_geometry, feature_geometry
from cadastral_exporter.services.geojson_export import (
    build_properties,
    group_features,
    write_feature_collection,
    write_grouped,
)
from cadastral_exporter.services.geopackage import GeoPackageWriter
from cadastral_exporter.services.reprojection import reproject_geojson_geometry
from cadastral_exporter.services.wkb import build_gpkg_blob, encode_wkb

logger = logging.getLogger(__name__)


class ExportStats(BaseModel):
    """Outcome of an export run."""
    exported: int = 0
    skipped: int = 0
    extent: Envelope = Envelope()
    files: list[str] = []


def transform_row_to_gpkg(row: CadastralRow) -> tuple[bytes, Envelope]:
    """GeoPackage blob of a row's geometry and the envelope stored in it."""
    geometry = extract_geometry(row.data)
    wkb = encode_wkb(geometry)
    envelope = calculate_envelope(geometry.coordinates)
    return build_gpkg_blob(wkb, envelope), envelope


def transform_row_to_feature(row: CadastralRow) -> dict:
    """WGS84 GeoJSON feature of a row, properties rebuilt from its columns."""
    feature = extract_feature(row.data)
    geometry = reproject_geojson_geometry(feature_geometry(feature))

    existing = feature.get("properties")
    feature.setdefault("type", "Feature")
    feature["geometry"] = geometry
    feature["properties"] = build_properties(row, existing if isinstance(existing, dict) else None)
    return feature


def export_geopackage(
    rows: Iterable[CadastralRow],
    writer: GeoPackageWriter,
    progress_interval: int = 100,
) -> ExportStats:
    """Encode and insert every row, then store the overall extent."""
    exported = 0
    skipped = 0
    extent = Envelope()

    for row in rows:
        try:
            blob, envelope = transform_row_to_gpkg(row)
            writer.insert(row, blob)
        except (GeometryError, RowRejected) as e:
            logger.warning("Skipping object %s: %s", row.code, e)
            skipped += 1
            continue

        extent = extent.union(envelope)
        exported += 1
        if progress_interval and exported % progress_interval == 0:
            logger.info("Exported %d objects...", exported)

    logger.info("Total exported: %d objects (%d skipped)", exported, skipped)
    if exported > 0:
        writer.update_extent(extent)
    return ExportStats(exported=exported, skipped=skipped, extent=extent, files=[str(writer.path)])


def export_geojson(
    rows: Iterable[CadastralRow],
    output: Union[str, Path],
    group_by: Optional[str] = None,
    progress_interval: int = 100,
) -> ExportStats:
    """Reproject every row to WGS84 and write one or more FeatureCollections."""
    features = []
    skipped = 0
    extent = Envelope()
    if group_by:
        logger.info("Grouping features by property: %s", group_by)

    for row in rows:
        try:
            feature = transform_row_to_feature(row)
        except GeometryError as e:
            logger.warning("Skipping object %s: %s", row.code, e)
            skipped += 1
            continue

        extent = extent.union(calculate_envelope(feature["geometry"]["coordinates"]))
        features.append(feature)
        if progress_interval and len(features) % progress_interval == 0:
            logger.info("Processed %d objects...", len(features))

    if group_by:
        groups = group_features(features, group_by)
        files = write_grouped(output, group_by, groups)
        logger.info("Total exported: %d features in %d files (%d skipped)", len(features), len(files), skipped)
    else:
        files = [write_feature_collection(output, features)]
        logger.info("Total exported: %d features (%d skipped)", len(features), skipped)

    return ExportStats(
        exported=len(features),
        skipped=skipped,
        extent=extent,
        files=[str(path) for path in files],
    )
