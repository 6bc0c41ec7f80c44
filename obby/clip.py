"""Moving axis-aligned square bodies so that they stop against each other."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from obby.vector import Vec2

_SEPARATION = 0.005


class ClipBehavior(Enum):
    CLIP = "clip"
    NO_CLIP = "no_clip"
    IGNORE = "ignore"


class Body(ABC):
    """An axis-aligned square that takes part in collisions."""

    @abstractmethod
    def center(self) -> Vec2:
        """Center of the square."""

    @abstractmethod
    def half_extent(self) -> float:
        """Half the side length of the square."""

    def clip_behavior(self) -> ClipBehavior:
        return ClipBehavior.CLIP


@dataclass(frozen=True)
class Unhindered:
    """The move went through without touching anything."""

    new_pos: Vec2


@dataclass(frozen=True)
class Clipped:
    """The move was stopped by ``other_body``; ``normal`` points away from it."""

    other_body: Body
    new_pos: Vec2
    normal: Vec2


ClipMoveResult = Union[Unhindered, Clipped]


def cast_box(
    pos: Vec2,
    vel: Vec2,
    half_extent: float,
    other_pos: Vec2,
    other_half_extent: float,
) -> Optional[Tuple[float, Vec2]]:
    """Sweep a square along ``vel`` against a resting square.

    Returns ``(time_of_impact, normal)`` where ``normal`` points from the moving
    square toward the one it hits, or ``None`` if they never meet. Squares that
    already overlap meet at time zero, with the normal along the axis of least
    penetration.
    """
    reach = half_extent + other_half_extent
    rel = pos - other_pos

    if abs(rel.x) < reach and abs(rel.y) < reach:
        depth_x = reach - abs(rel.x)
        depth_y = reach - abs(rel.y)
        if depth_x < depth_y:
            return 0.0, Vec2(1.0 if rel.x <= 0.0 else -1.0, 0.0)
        return 0.0, Vec2(0.0, 1.0 if rel.y <= 0.0 else -1.0)

    t_near = -math.inf
    t_far = math.inf
    normal: Optional[Vec2] = None
    for p, v, axis in ((rel.x, vel.x, Vec2(1.0, 0.0)), (rel.y, vel.y, Vec2(0.0, 1.0))):
        if v == 0.0:
            if abs(p) >= reach:
                return None
            continue
        lo, hi = sorted(((-reach - p) / v, (reach - p) / v))
        if lo >= t_near:
            t_near = lo
            normal = axis * math.copysign(1.0, v)
        t_far = min(t_far, hi)

    if normal is None or t_near >= t_far or t_near < 0.0:
        return None
    return t_near, normal


def clip_move(body: Body, vel: Vec2, other_bodies: Iterable[Body]) -> ClipMoveResult:
    """Move ``body`` by ``vel``, stopping just short of the bodies in its way."""
    result: ClipMoveResult = Unhindered(body.center() + vel)
    new_pos = body.center()
    backoff = vel.normalize_or_zero() * _SEPARATION
    for other in other_bodies:
        hit = cast_box(
            new_pos, vel, body.half_extent(), other.center(), other.half_extent()
        )
        if hit is None:
            continue
        time_of_impact, normal = hit
        if time_of_impact <= 1.0:
            new_pos = new_pos + vel * time_of_impact - backoff
            result = Clipped(other_body=other, new_pos=new_pos, normal=-normal)
    return result