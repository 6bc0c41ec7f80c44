"""Texture atlases and the loading of level maps."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol

from obby.model import MapResult, MapStatus
from obby.tmx import TmxError, parse_tmx

TILESET_PATH = "res/maps/tileset.tsx"
_U16_MAX = 0xFFFF


class Texture(Protocol):
    def get_width(self) -> int: ...

    def get_height(self) -> int: ...


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float


def _to_u16(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U16_MAX:
        return _U16_MAX
    return math.trunc(value)


@dataclass
class Atlas:
    """A texture cut into ``col`` by ``rows`` equal cells."""

    col: int
    rows: int
    texture: Texture

    def __post_init__(self) -> None:
        if self.col <= 0 or self.rows <= 0:
            raise ValueError("an atlas needs at least one column and one row")

    def index(self, index: float) -> Rect:
        """Source rectangle of cell ``index``, counted row by row."""
        w = self.texture.get_width() / self.col
        h = self.texture.get_height() / self.rows
        row, col = divmod(_to_u16(index), self.col)
        return Rect(col * w, row * h, w, h)


@dataclass
class Assets:
    """Loaded images, sounds and maps; file paths are relative to ``root``."""

    tileset: Atlas
    maps: Dict[str, MapResult] = field(default_factory=dict)
    maps_pending: List[str] = field(default_factory=list)
    sfx: Dict[str, List[Any]] = field(default_factory=dict)
    root: Path = field(default_factory=lambda: Path("."))

    def _read(self, path: str) -> bytes:
        return (self.root / path).read_bytes()

    def load_map(self, path: str) -> MapResult:
        """Current state of map ``path``, queueing it for loading the first time."""
        if path not in self.maps:
            self.maps[path] = MapResult(MapStatus.PENDING)
            self.maps_pending.append(path)
        return self.maps[path]

    def load_pending(self) -> None:
        """Load every queued map; maps that fail to parse become NOT_FOUND."""
        pending, self.maps_pending = self.maps_pending, []
        for path in pending:
            resources = {TILESET_PATH: self._read(TILESET_PATH), path: self._read(path)}
            try:
                level = parse_tmx(resources[path], path, resources)
            except TmxError:
                self.maps[path] = MapResult(MapStatus.NOT_FOUND)
            else:
                self.maps[path] = MapResult(MapStatus.OK, level)