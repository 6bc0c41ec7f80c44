import pytest

from obby.behaviour import update_coin, update_player_starting
from obby.model import (
    BlockBody,
    Clip,
    Context,
    EntityBody,
    EntityVariant,
    EventKind,
    Map,
    MapResult,
    MapStatus,
    MapTile,
    VoidBody,
)
from obby.vector import Vec2
from obby.world import Game, spawn_cloud, spawn_coin, spawn_goal, spawn_player

_TILES = {
    ".": MapTile(),
    "#": MapTile(is_block=True, variant=1),
    "P": MapTile(is_player=True, is_entity=True),
    "G": MapTile(is_goal=True, is_entity=True),
    "C": MapTile(is_coin=True, is_entity=True),
    "c": MapTile(is_cloud=True, is_entity=True),
}


class GridMap(Map):
    def __init__(self, rows):
        self.rows = rows

    def background(self):
        return (0, 0, 0)

    def width(self):
        return len(self.rows[0])

    def height(self):
        return len(self.rows)

    def tile(self, x, y):
        return _TILES[self.rows[y][x]]


class FakeContext(Context):
    def __init__(self, names=("a", "b"), maps=None, pending=(), dt=0.25):
        self.names = list(names)
        self.maps = dict(maps or {})
        self.pending = set(pending)
        self.frame = dt

    def map(self, name):
        if name in self.maps:
            return MapResult(MapStatus.OK, self.maps[name])
        if name in self.pending:
            return MapResult(MapStatus.PENDING)
        return MapResult(MapStatus.NOT_FOUND)

    def dt(self):
        return self.frame

    def d_pad(self):
        return Vec2()

    def is_key_down(self, key):
        return False

    def is_key_pressed(self, key):
        return False

    def is_any_key_pressed(self):
        return False

    def map_list(self):
        return self.names

    def rand_f32(self):
        return 0.5


ROWS = ["..G..", "PC.c.", "#####"]


def _loaded(rows=ROWS, ctx=None):
    ctx = ctx or FakeContext()
    game = Game()
    game.map_current = GridMap(rows)
    game.restart(ctx, False)
    return game


def test_spawn_entity_assigns_increasing_ids():
    game = Game()
    first = game.spawn_entity()
    second = game.spawn_entity()
    assert (first.id, second.id) == (1, 2)
    assert game.entities == {1: first, 2: second}


def test_init_uses_first_map():
    game = Game()
    game.init(FakeContext(names=["one", "two"]))
    assert game.lives_extra == 3
    assert game.map_next == "one"


def test_init_without_maps_raises():
    with pytest.raises(ValueError):
        Game().init(FakeContext(names=[]))


def test_next_level_advances():
    game = Game()
    game.next_level(FakeContext(names=["one", "two"]))
    assert game.level_current == 1
    assert game.map_next == "two"
    assert game.events == []


def test_next_level_after_last_is_game_over():
    game = Game(level_current=1, score=42)
    game.next_level(FakeContext(names=["one", "two"]))
    assert game.level_current == 1
    assert [(e.kind, e.score) for e in game.events] == [(EventKind.GAME_OVER, 42)]


def test_restart_builds_grid_and_entities():
    game = _loaded()
    assert (game.grid_width, game.grid_height) == (5, 3)
    assert all(game.grid[(x, 2)].is_block for x in range(5))
    assert (0, 1) not in game.grid
    assert (2, 0) not in game.grid
    assert not game.grid[(2, 1)].is_block

    by_variant = {e.variant: e for e in game.entities.values()}
    assert set(by_variant) == {
        EntityVariant.PLAYER,
        EntityVariant.GOAL,
        EntityVariant.COIN,
        EntityVariant.CLOUD,
    }
    assert by_variant[EntityVariant.PLAYER].pos == Vec2(0.5, 1.5)
    assert by_variant[EntityVariant.GOAL].pos == Vec2(2.5, 0.5)
    assert by_variant[EntityVariant.COIN].clip is Clip.NO_CLIP
    assert by_variant[EntityVariant.CLOUD].pos_start == Vec2(3.5, 1.5)


def test_restart_level_keeps_progress():
    ctx = FakeContext()
    game = _loaded(ctx=ctx)
    game.score, game.coins, game.lives_extra = 700, 5, 2
    game.level_current, game.skin_chosen = 1, 3
    game.events.append(object())
    game.restart(ctx, False)
    assert (game.score, game.coins, game.lives_extra) == (700, 5, 2)
    assert (game.level_current, game.skin_chosen) == (1, 3)
    assert game.events == []
    assert sorted(game.entities) == [1, 2, 3, 4]


def test_restart_whole_game_resets():
    ctx = FakeContext(names=["one", "two"])
    game = _loaded(ctx=ctx)
    game.score, game.level_current, game.skin_chosen = 700, 1, 4
    game.restart(ctx, True)
    assert (game.score, game.level_current) == (0, 0)
    assert game.skin_chosen == 4
    assert game.lives_extra == 3
    assert game.map_next == "one"
    assert game.map_current is None
    assert game.entities == {}
    assert game.grid == {}


def test_bodies_include_voids_blocks_and_clipping_entities():
    game = _loaded()
    bodies = game.bodies((0, 1))
    voids = {b.index for b in bodies if isinstance(b, VoidBody)}
    blocks = {b.index for b in bodies if isinstance(b, BlockBody)}
    entities = {b.entity.variant for b in bodies if isinstance(b, EntityBody)}
    assert voids == {(-1, 0), (-1, 1), (-1, 2)}
    assert blocks == {(0, 2), (1, 2)}
    assert EntityVariant.COIN not in entities
    assert entities == {EntityVariant.PLAYER, EntityVariant.GOAL, EntityVariant.CLOUD}


def test_update_waits_for_pending_map():
    ctx = FakeContext(pending={"a"})
    game = Game(map_next="a")
    game.update(ctx)
    assert game.map_next == "a"
    assert game.elapsed_total_sec == 0.0


def test_update_drops_missing_map():
    ctx = FakeContext()
    game = Game(map_next="missing")
    game.update(ctx)
    assert game.map_next == ""
    assert game.map_current is None
    assert game.elapsed_total_sec == ctx.dt()


def test_update_loads_map_and_starts_level():
    level = GridMap(ROWS)
    ctx = FakeContext(maps={"a": level})
    game = Game(map_next="a")
    game.update(ctx)
    assert game.map_current is level
    assert game.map_next == ""
    assert game.pause is True
    assert game.center_text == "LEVEL 1"
    assert len(game.entities) == 4


def test_update_removes_deleted_entities():
    ctx = FakeContext()
    game = Game()
    entity = game.spawn_entity()

    def vanish(e, g, c):
        e.delete_me = True

    entity.update = vanish
    game.update(ctx)
    assert game.entities == {}


def test_spawn_player_uses_chosen_skin():
    game = Game(skin_chosen=2)
    player = spawn_player(game, Vec2(1.5, 2.5))
    assert player.is_player is True
    assert player.skin == 2
    assert player.pos_start == Vec2(1.5, 2.5)
    assert player.update is update_player_starting
    assert player.timer0.timer_sec == 1.0


def test_spawn_coin_goal_cloud():
    game = Game()
    coin = spawn_coin(game, Vec2(1.5, 1.5))
    goal = spawn_goal(game, Vec2(2.5, 1.5))
    cloud = spawn_cloud(game, Vec2(3.5, 1.5))
    assert coin.update is update_coin
    assert coin.timer0.timer_start_sec == 2.0
    assert goal.is_goal is True
    assert goal.clip is Clip.CLIP
    assert cloud.variant is EntityVariant.CLOUD
    assert [e.id for e in (coin, goal, cloud)] == [1, 2, 3]