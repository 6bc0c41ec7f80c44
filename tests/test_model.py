import pytest

from obby.clip import ClipBehavior, Clipped, clip_move
from obby.model import (
    BlockBody,
    Clip,
    Context,
    DirX,
    Entity,
    EntityBody,
    EntityVariant,
    Event,
    EventKind,
    Keys,
    Map,
    MapResult,
    MapStatus,
    MapTile,
    Tile,
    VoidBody,
    noop_update,
)
from obby.vector import Vec2


class FixedMap(Map):
    def background(self):
        return (1, 2, 3)

    def width(self):
        return 4

    def height(self):
        return 3

    def tile(self, x, y):
        return MapTile(is_block=(y == 2), variant=x)


class FixedContext(Context):
    def __init__(self):
        self.pressed = {Keys.SPACE}

    def map(self, name):
        return MapResult(MapStatus.OK, FixedMap()) if name == "a" else MapResult(MapStatus.NOT_FOUND)

    def dt(self):
        return 0.016

    def d_pad(self):
        return Vec2(-1.0, 0.0)

    def is_key_down(self, key):
        return key in self.pressed

    def is_key_pressed(self, key):
        return key in self.pressed

    def is_any_key_pressed(self):
        return bool(self.pressed)

    def map_list(self):
        return ["a", "b"]

    def rand_f32(self):
        return 0.5


def test_entity_defaults():
    e = Entity()
    assert e.update is noop_update
    assert e.clip is Clip.CLIP
    assert e.dir_x is DirX.RIGHT
    assert e.variant is EntityVariant.UNKNOWN
    assert e.pos == Vec2() and e.vel == Vec2()
    assert not e.delete_me and not e.is_touching_floor


def test_entities_have_separate_timers():
    a, b = Entity(), Entity()
    a.timer0.start(1.0)
    assert b.timer0.done()


def test_noop_update_leaves_entity_alone():
    e = Entity(pos=Vec2(1.0, 2.0))
    noop_update(e, None, FixedContext())
    assert e.pos == Vec2(1.0, 2.0)
    assert not e.delete_me


def test_entity_cell_truncates_position():
    e = Entity(pos=Vec2(2.7, 3.2))
    assert e.cell() == (2, 3)


def test_entity_body_follows_entity():
    e = Entity(pos=Vec2(1.5, 1.5))
    body = e.body()
    assert body == EntityBody(e)
    assert body.center() == e.pos
    assert body.half_extent() == 0.45
    e.pos = Vec2(4.0, 4.0)
    assert body.center() == e.pos


def test_block_and_void_centers_are_cell_centers():
    block = BlockBody((2, 3), Tile(is_block=True))
    void = VoidBody((2, 3))
    assert block.center() == Vec2(2.5, 3.5)
    assert void.center() == block.center()
    assert block.half_extent() == 0.5
    assert void.half_extent() == 0.5
    assert block.clip_behavior() is ClipBehavior.CLIP


def test_entity_clips_against_block_body():
    e = Entity(pos=Vec2(0.5, 0.5))
    floor = BlockBody((0, 2), Tile(is_block=True))
    result = clip_move(e.body(), Vec2(0.0, 2.0), [floor])
    assert isinstance(result, Clipped)
    assert result.other_body is floor
    assert result.normal.y < 0.0


def test_map_result_requires_map_for_ok():
    with pytest.raises(ValueError):
        MapResult(MapStatus.OK)


def test_map_result_rejects_map_when_pending():
    with pytest.raises(ValueError):
        MapResult(MapStatus.PENDING, FixedMap())


def test_map_result_ok_carries_map():
    m = FixedMap()
    result = MapResult(MapStatus.OK, m)
    assert result.map is m
    assert MapResult(MapStatus.NOT_FOUND).map is None


def test_map_and_context_are_abstract():
    with pytest.raises(TypeError):
        Map()
    with pytest.raises(TypeError):
        Context()


def test_map_result_statuses_and_payload():
    pending = MapResult(MapStatus.PENDING)
    assert pending.status is MapStatus.PENDING
    assert pending.map is None
    missing = MapResult(MapStatus.NOT_FOUND)
    assert missing.status is MapStatus.NOT_FOUND
    m = FixedMap()
    found = MapResult(MapStatus.OK, m)
    assert found.status is MapStatus.OK
    assert found.map.tile(1, 2) == MapTile(is_block=True, variant=1)


def test_map_tile_defaults_are_false():
    tile = MapTile()
    assert not any(
        [tile.is_player, tile.is_goal, tile.is_block, tile.is_cloud,
         tile.is_foreground, tile.is_entity, tile.is_coin, tile.is_deadly]
    )
    assert tile.variant == 0


def test_event_game_over_carries_score():
    event = Event(EventKind.GAME_OVER, score=1337)
    assert event.kind is EventKind.GAME_OVER
    assert event.score == 1337
    assert Event(EventKind.WON) == Event(EventKind.WON, 0)