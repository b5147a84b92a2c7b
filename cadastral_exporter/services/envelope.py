"""Axis-aligned bounding boxes of coordinate trees."""
import struct
from numbers import Real
from typing import Any

from pydantic import BaseModel, ConfigDict

# Values held before any position has been seen
EMPTY_MIN = 1e10
EMPTY_MAX = -1e10

_ENVELOPE = struct.Struct("<4d")


class Envelope(BaseModel):
    """Bounding box as (min_x, max_x, min_y, max_y).

    A fresh Envelope holds sentinel values with min > max, meaning no
    position has been observed yet.
    """
    model_config = ConfigDict(frozen=True)

    min_x: float = EMPTY_MIN
    max_x: float = EMPTY_MAX
    min_y: float = EMPTY_MIN
    max_y: float = EMPTY_MAX

    @property
    def is_empty(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y

    def union(self, other: "Envelope") -> "Envelope":
        """Smallest envelope covering both. Commutative and associative."""
        return Envelope(
            min_x=min(self.min_x, other.min_x),
            max_x=max(self.max_x, other.max_x),
            min_y=min(self.min_y, other.min_y),
            max_y=max(self.max_y, other.max_y),
        )

    def to_bytes(self) -> bytes:
        """32-byte little-endian minX, maxX, minY, maxY."""
        return _ENVELOPE.pack(self.min_x, self.max_x, self.min_y, self.max_y)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Envelope":
        min_x, max_x, min_y, max_y = _ENVELOPE.unpack(data)
        return cls(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def calculate_envelope(tree: Any) -> Envelope:
    """Bounding box of every position found in a nested coordinate tree.

    Works at any nesting depth: a sequence whose first two items are numbers
    is a position, any other sequence is descended into. Non-sequence leaves
    are ignored. Returns the empty (sentinel) envelope if no position is found.
    """
    bounds = [EMPTY_MIN, EMPTY_MAX, EMPTY_MIN, EMPTY_MAX]

    def visit(node: Any) -> None:
        if not isinstance(node, (list, tuple)):
            return
        if len(node) >= 2 and _is_number(node[0]) and _is_number(node[1]):
            x, y = node[0], node[1]
            if x < bounds[0]:
                bounds[0] = x
            if x > bounds[1]:
                bounds[1] = x
            if y < bounds[2]:
                bounds[2] = y
            if y > bounds[3]:
                bounds[3] = y
            return
        for child in node:
            visit(child)

    visit(tree)
    min_x, max_x, min_y, max_y = bounds
    return Envelope(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)
