"""Locate the parcel geometry inside a stored NSPD payload.

The payload stored per row looks like::

    {"data": {"type": "FeatureCollection", "features": [{"geometry": {...}, ...}]}, ...}

Only the first feature is used; each row describes a single parcel.
"""
import json
from typing import Any, Mapping, Union

from cadastral_exporter.exceptions import InvalidPayload, MissingField
from cadastral_exporter.schemas.geometry import Geometry, parse_geometry

Payload = Union[str, bytes, Mapping[str, Any]]


def load_payload(payload: Payload) -> Mapping[str, Any]:
    """Parse the payload JSON text (mappings are passed through)."""
    if isinstance(payload, Mapping):
        return payload
    try:
        document = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise InvalidPayload(f"failed to parse JSON: {e}") from e
    if not isinstance(document, Mapping):
        raise MissingField("data", f"payload is a JSON {type(document).__name__}, not an object")
    return document


def extract_feature(payload: Payload) -> dict:
    """Return the first feature of the embedded FeatureCollection."""
    document = load_payload(payload)

    data = document.get("data")
    if not isinstance(data, Mapping):
        raise MissingField("data")

    features = data.get("features")
    if not isinstance(features, list) or not features:
        raise MissingField("features")

    feature = features[0]
    if not isinstance(feature, Mapping):
        raise MissingField("features[0]", "invalid feature structure")
    return dict(feature)


def feature_geometry(feature: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the raw geometry object of a feature."""
    geometry = feature.get("geometry")
    if not isinstance(geometry, Mapping) or not geometry:
        raise MissingField("geometry")
    return geometry


def extract_geometry(payload: Payload) -> Geometry:
    """Extract and validate the geometry of the first feature of a payload."""
    return parse_geometry(feature_geometry(extract_feature(payload)))
