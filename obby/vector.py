"""A small immutable two-dimensional vector."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Tuple, Union

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1

Scalar = Union[int, float]


def _to_i32(value: float) -> int:
    """Truncate toward zero, saturating at the 32-bit range; NaN becomes 0."""
    if math.isnan(value):
        return 0
    if value >= _I32_MAX:
        return _I32_MAX
    if value <= _I32_MIN:
        return _I32_MIN
    return math.trunc(value)


@dataclass(frozen=True)
class Vec2:
    """A point or direction in world units."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: object) -> Vec2:
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: object) -> Vec2:
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __mul__(self, other: object) -> Vec2:
        if isinstance(other, Vec2):
            return Vec2(self.x * other.x, self.y * other.y)
        if isinstance(other, (int, float)):
            return Vec2(self.x * other, self.y * other)
        return NotImplemented

    def __rmul__(self, other: object) -> Vec2:
        if isinstance(other, (int, float)):
            return Vec2(self.x * other, self.y * other)
        return NotImplemented

    def __truediv__(self, other: object) -> Vec2:
        if isinstance(other, (int, float)):
            return Vec2(self.x / other, self.y / other)
        return NotImplemented

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def length(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y)

    def normalize_or_zero(self) -> Vec2:
        """Unit vector in the same direction, or the zero vector if that is undefined."""
        length = self.length()
        if length > 0.0 and math.isfinite(length):
            return Vec2(self.x / length, self.y / length)
        return Vec2()

    def as_cell(self) -> Tuple[int, int]:
        """Integer grid cell, truncating each coordinate toward zero."""
        return _to_i32(self.x), _to_i32(self.y)