"""Exporter error taxonomy.

GeometryError and its subclasses are row-scoped: the orchestrator logs them,
skips the row and carries on. StructuralError aborts the whole run.
"""
from typing import Optional


class ExportError(Exception):
    """Base class for all exporter errors."""


class GeometryError(ExportError, ValueError):
    """A single row could not be turned into an output geometry."""


class MalformedCoordinates(GeometryError):
    """A position, ring or polygon lacks the minimum required shape."""


class UnsupportedGeometryType(GeometryError):
    """Geometry type outside Point, LineString, Polygon and MultiPolygon."""

    def __init__(self, geometry_type: Optional[object]):
        self.geometry_type = geometry_type
        super().__init__(f"unsupported geometry type: {geometry_type!r}")


class MissingField(GeometryError):
    """A required field of the row payload is absent, empty or mistyped."""

    def __init__(self, name: str, detail: Optional[str] = None):
        self.name = name
        message = f"missing field {name!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NonFiniteProjection(GeometryError):
    """Reprojection produced NaN or infinity."""


class InvalidPayload(GeometryError):
    """The row payload is not a JSON document."""


class StructuralError(ExportError):
    """Failure that aborts the whole export run."""


class SourceUnavailable(StructuralError):
    """The source database cannot be opened or queried."""


class DestinationError(StructuralError):
    """The destination cannot be created, initialised or written."""


class RowRejected(ExportError):
    """The destination refused a single row (e.g. duplicate key)."""
