"""GeoJSON FeatureCollection assembly and writing."""
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from cadastral_exporter.exceptions import DestinationError
from cadastral_exporter.schemas.cadastral import CadastralRow
from cadastral_exporter.utils.formatting import format_date, sanitize_filename, stringify_value

logger = logging.getLogger(__name__)

UNKNOWN_GROUP = "unknown"


def build_properties(row: CadastralRow, existing: Optional[Mapping[str, Any]] = None) -> dict:
    """Feature properties derived from the source row.

    Keys of ``existing`` that are not derived from the row are kept.
    """
    properties = {
        "code": row.code,
        "quarter_code": row.quarter_code,
        "load_status": row.load_status,
        "area": row.area,
        "cost_value": row.cost_value,
        "permitted_use_established_by_document": row.permitted_use_established_by_document,
        "right_type": row.right_type,
        "status": row.status,
        "land_record_type": row.land_record_type,
        "land_record_subtype": row.land_record_subtype,
        "land_record_category_type": row.land_record_category_type,
    }
    if row.update_date is not None:
        properties["update_date"] = format_date(row.update_date)

    for key, value in (existing or {}).items():
        if key not in properties:
            properties[key] = value
    return properties


def group_value(properties: Mapping[str, Any], name: str) -> str:
    """Group key of a feature for the given property name."""
    if name not in properties:
        return UNKNOWN_GROUP
    return stringify_value(properties[name]) or UNKNOWN_GROUP


def feature_collection(features: list) -> dict:
    return {"type": "FeatureCollection", "features": features}


def grouped_output_dir(output: Union[str, Path]) -> Path:
    """Directory receiving one file per group.

    ``out/cadastral.geojson`` -> ``out``; ``cadastral.geojson`` -> ``cadastral``;
    a path without extension is used as the directory itself.
    """
    output = Path(output)
    if not output.suffix:
        return output
    if output.parent == Path("."):
        return Path(output.stem)
    return output.parent


def grouped_filename(output: Union[str, Path], group_by: str, value: str) -> str:
    base = Path(output).stem if Path(output).suffix else "cadastral"
    return f"{base}_{group_by}_{sanitize_filename(value)}.geojson"


def write_feature_collection(path: Union[str, Path], features: list) -> Path:
    """Write features as one indented FeatureCollection file."""
    path = Path(path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(feature_collection(features), f, ensure_ascii=False, indent=2)
            f.write("\n")
    except OSError as e:
        raise DestinationError(f"failed to write {path}: {e}") from e
    return path


def write_grouped(output: Union[str, Path], group_by: str, groups: Mapping[str, list]) -> list[Path]:
    """Write one FeatureCollection file per group, return the written paths."""
    output_dir = grouped_output_dir(output)
    try:
        if output_dir.exists() and not output_dir.is_dir():
            output_dir.unlink()
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DestinationError(f"failed to create output directory {output_dir}: {e}") from e

    written = []
    for value, features in groups.items():
        path = write_feature_collection(output_dir / grouped_filename(output, group_by, value), features)
        logger.info("  Created: %s (%d features)", path, len(features))
        written.append(path)
    return written


def group_features(features: Iterable[dict], group_by: str) -> dict[str, list]:
    """Partition features by the stringified value of one property."""
    groups: dict[str, list] = {}
    for feature in features:
        key = group_value(feature.get("properties") or {}, group_by)
        groups.setdefault(key, []).append(feature)
    return groups
