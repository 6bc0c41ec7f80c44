"""The state of a running game and the spawning of its entities."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Tuple

from obby import behaviour
from obby.clip import Body
from obby.model import (
    BlockBody,
    Clip,
    Context,
    Entity,
    EntityBody,
    EntityVariant,
    Event,
    EventKind,
    Map,
    MapStatus,
    Tile,
    VoidBody,
)
from obby.vector import Vec2

_log = logging.getLogger(__name__)

EXTRA_LIVES = 3
PLAYER_INTRO_SEC = 1.0
COIN_TIMER_SEC = 2.0


def _first_map(ctx: Context) -> str:
    names = ctx.map_list()
    if not names:
        raise ValueError("the map list is empty")
    return names[0]


@dataclass(eq=False)
class Game:
    """Everything about the game in progress."""

    score: int = 0
    level_current: int = 0
    map_next: str = ""
    map_current: Optional[Map] = None
    grid: Dict[Tuple[int, int], Tile] = field(default_factory=dict)
    grid_width: int = 0
    grid_height: int = 0
    entities: Dict[int, Entity] = field(default_factory=dict)
    center_text: str = ""
    player: int = 0
    events: List[Event] = field(default_factory=list)
    pause: bool = False
    elapsed_total_sec: float = 0.0
    lives_extra: int = 0
    coins: int = 0
    skin_chosen: int = 0
    next_id: int = 0

    def init(self, ctx: Context) -> None:
        """Prepare a new game starting at the first listed map."""
        self.lives_extra = EXTRA_LIVES
        self.map_next = _first_map(ctx)

    def next_level(self, ctx: Context) -> None:
        """Queue the next map, or report game over after the last one."""
        names = ctx.map_list()
        following = self.level_current + 1
        if following < len(names):
            self.level_current = following
            self.map_next = names[following]
        else:
            self.events.append(Event(EventKind.GAME_OVER, score=self.score))

    def bodies(self, index: Tuple[int, int]) -> List[Body]:
        """Solid bodies around grid cell ``index`` plus every clipping entity."""
        found: List[Body] = []
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                cell_index = (index[0] + dx, index[1] + dy)
                tile = self.grid.get(cell_index)
                if tile is not None:
                    if tile.is_block:
                        found.append(BlockBody(cell_index, tile))
                elif cell_index[0] < 0 or cell_index[0] >= self.grid_width:
                    found.append(VoidBody(cell_index))
        found.extend(
            EntityBody(e) for e in self.entities.values() if e.clip is Clip.CLIP
        )
        return found

    def _become(self, other: Game) -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))

    def restart(self, ctx: Context, whole_game: bool) -> None:
        """Reset the level, or the whole game, and rebuild it from the current map."""
        if whole_game:
            fresh = Game(
                lives_extra=EXTRA_LIVES,
                map_next=_first_map(ctx),
                skin_chosen=self.skin_chosen,
            )
        else:
            fresh = Game(
                level_current=self.level_current,
                map_current=self.map_current,
                score=self.score,
                elapsed_total_sec=self.elapsed_total_sec,
                coins=self.coins,
                lives_extra=self.lives_extra,
                skin_chosen=self.skin_chosen,
            )
        self._become(fresh)

        level = self.map_current
        if level is None:
            return
        for y in range(level.height()):
            for x in range(level.width()):
                tile = level.tile(x, y)
                if not tile.is_entity:
                    self.grid[(x, y)] = Tile(
                        variant=tile.variant,
                        is_block=tile.is_block,
                        is_foreground=tile.is_foreground,
                        is_deadly=tile.is_deadly,
                    )
                pos = Vec2(x + 0.5, y + 0.5)
                if tile.is_player:
                    spawn_player(self, pos)
                if tile.is_goal:
                    spawn_goal(self, pos)
                if tile.is_coin:
                    spawn_coin(self, pos)
                if tile.is_cloud:
                    spawn_cloud(self, pos)
        self.grid_width = level.width()
        self.grid_height = level.height()

    def update(self, ctx: Context) -> None:
        """Advance the game by one frame."""
        if self.map_next:
            result = ctx.map(self.map_next)
            if result.status is MapStatus.PENDING:
                return
            if result.status is MapStatus.NOT_FOUND:
                _log.warning("failed to find map with name %s", self.map_next)
                self.map_next = ""
            else:
                self.map_current = result.map
                self.map_next = ""
                self.restart(ctx, False)

        for entity_id in list(self.entities):
            entity = self.entities.pop(entity_id, None)
            if entity is None:
                continue
            entity.update(entity, self, ctx)
            if not entity.delete_me:
                self.entities[entity_id] = entity

        if not self.pause:
            self.elapsed_total_sec += ctx.dt()

    def spawn_entity(self) -> Entity:
        """Add a fresh entity with a new id and return it."""
        self.next_id += 1
        entity = Entity(id=self.next_id)
        self.entities[entity.id] = entity
        return entity


def spawn_player(game: Game, pos: Vec2) -> Entity:
    entity = game.spawn_entity()
    entity.is_player = True
    entity.pos = pos
    entity.pos_start = pos
    entity.update = behaviour.update_player_starting
    entity.variant = EntityVariant.PLAYER
    entity.skin = game.skin_chosen
    entity.timer0.start(PLAYER_INTRO_SEC)
    return entity


def spawn_coin(game: Game, pos: Vec2) -> Entity:
    entity = game.spawn_entity()
    entity.pos = pos
    entity.pos_start = pos
    entity.variant = EntityVariant.COIN
    entity.update = behaviour.update_coin
    entity.timer0.timer_start_sec = COIN_TIMER_SEC
    entity.clip = Clip.NO_CLIP
    return entity


def spawn_goal(game: Game, pos: Vec2) -> Entity:
    entity = game.spawn_entity()
    entity.is_goal = True
    entity.pos = pos
    entity.pos_start = pos
    entity.variant = EntityVariant.GOAL
    return entity


def spawn_cloud(game: Game, pos: Vec2) -> Entity:
    entity = game.spawn_entity()
    entity.pos = pos
    entity.pos_start = pos
    entity.variant = EntityVariant.CLOUD
    entity.update = behaviour.update_cloud
    return entity