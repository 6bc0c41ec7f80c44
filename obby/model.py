"""Game data types: tiles, maps, entities, events and the host context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from obby.clip import Body
from obby.timer import Timer
from obby.vector import Vec2


@dataclass
class Tile:
    """A cell of the level grid."""

    variant: int = 0
    is_block: bool = False
    is_foreground: bool = False
    is_deadly: bool = False


@dataclass
class MapTile:
    """What a level map says about one of its cells."""

    is_player: bool = False
    is_goal: bool = False
    is_block: bool = False
    is_cloud: bool = False
    is_foreground: bool = False
    is_entity: bool = False
    is_coin: bool = False
    is_deadly: bool = False
    variant: int = 0


class Map(ABC):
    """A loaded level."""

    @abstractmethod
    def background(self) -> Tuple[int, int, int]:
        """Background colour as an RGB triple."""

    @abstractmethod
    def width(self) -> int:
        """Width in cells."""

    @abstractmethod
    def height(self) -> int:
        """Height in cells."""

    @abstractmethod
    def tile(self, x: int, y: int) -> MapTile:
        """Description of the cell at ``(x, y)``."""


class MapStatus(Enum):
    NOT_FOUND = "not_found"
    PENDING = "pending"
    OK = "ok"


@dataclass(frozen=True)
class MapResult:
    """Outcome of asking for a map; ``map`` is set only when ``status`` is OK."""

    status: MapStatus
    map: Optional[Map] = None

    def __post_init__(self) -> None:
        if self.status is MapStatus.OK and self.map is None:
            raise ValueError("an OK map result needs a map")
        if self.status is not MapStatus.OK and self.map is not None:
            raise ValueError(f"a {self.status.value} map result cannot carry a map")


class Keys(Enum):
    SPACE = "space"
    LEFT = "left"
    RIGHT = "right"


class Context(ABC):
    """What the game needs from its host each frame."""

    @abstractmethod
    def map(self, name: str) -> MapResult:
        """Look up a map by name, starting a load if needed."""

    @abstractmethod
    def dt(self) -> float:
        """Seconds since the previous frame."""

    @abstractmethod
    def d_pad(self) -> Vec2:
        """Directional input."""

    @abstractmethod
    def is_key_down(self, key: Keys) -> bool:
        """Whether ``key`` is held."""

    @abstractmethod
    def is_key_pressed(self, key: Keys) -> bool:
        """Whether ``key`` went down this frame."""

    @abstractmethod
    def is_any_key_pressed(self) -> bool:
        """Whether any key went down this frame."""

    @abstractmethod
    def map_list(self) -> List[str]:
        """Names of the levels in play order."""

    @abstractmethod
    def rand_f32(self) -> float:
        """A random number in ``[0, 1]``."""


class EventKind(Enum):
    PICKUP_COIN = "pickup_coin"
    WON = "won"
    DIED = "died"
    PICKUP_EXTRA_LIFE = "pickup_extra_life"
    PLAYER_JUMP = "player_jump"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Event:
    """Something that happened during an update; ``score`` is used by GAME_OVER."""

    kind: EventKind
    score: int = 0


class DirX(Enum):
    LEFT = "left"
    RIGHT = "right"


class EntityVariant(Enum):
    UNKNOWN = "unknown"
    PLAYER = "player"
    GOAL = "goal"
    COIN = "coin"
    CLOUD = "cloud"


class Clip(Enum):
    CLIP = "clip"
    NO_CLIP = "no_clip"


def noop_update(entity: Entity, game: Any, ctx: Context) -> None:
    """Update function for entities that do nothing on their own."""


UpdateFn = Callable[["Entity", Any, Context], None]


@dataclass(eq=False)
class Entity:
    """A moving thing in the level; ``skin`` matters for the player only."""

    id: int = 0
    pos: Vec2 = field(default_factory=Vec2)
    pos_start: Vec2 = field(default_factory=Vec2)
    vel: Vec2 = field(default_factory=Vec2)
    is_touching_floor: bool = False
    is_player: bool = False
    is_goal: bool = False
    update: UpdateFn = noop_update
    delete_me: bool = False
    timer0: Timer = field(default_factory=Timer)
    dir_x: DirX = DirX.RIGHT
    variant: EntityVariant = EntityVariant.UNKNOWN
    clip: Clip = Clip.CLIP
    skin: int = 0

    def cell(self) -> Tuple[int, int]:
        """Grid cell containing the entity."""
        return self.pos.as_cell()

    def body(self) -> EntityBody:
        return EntityBody(self)


def _cell_center(index: Tuple[int, int]) -> Vec2:
    return Vec2(index[0] + 0.5, index[1] + 0.5)


@dataclass(frozen=True)
class EntityBody(Body):
    entity: Entity

    def center(self) -> Vec2:
        return self.entity.pos

    def half_extent(self) -> float:
        return 0.45


@dataclass(frozen=True)
class BlockBody(Body):
    index: Tuple[int, int]
    tile: Tile = field(default_factory=Tile)

    def center(self) -> Vec2:
        return _cell_center(self.index)

    def half_extent(self) -> float:
        return 0.5


@dataclass(frozen=True)
class VoidBody(Body):
    """An invisible wall beside the level."""

    index: Tuple[int, int]

    def center(self) -> Vec2:
        return _cell_center(self.index)

    def half_extent(self) -> float:
        return 0.5