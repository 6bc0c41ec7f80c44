from dataclasses import dataclass

import pytest

from obby.clip import Body, ClipBehavior, Clipped, Unhindered, cast_box, clip_move
from obby.vector import Vec2


@dataclass
class Square(Body):
    pos: Vec2
    half: float = 0.5

    def center(self):
        return self.pos

    def half_extent(self):
        return self.half


def mover(x=0.5, y=0.5):
    return Square(Vec2(x, y), 0.45)


def test_body_is_abstract():
    with pytest.raises(TypeError):
        Body()


def test_default_clip_behavior():
    assert Square(Vec2()).clip_behavior() is ClipBehavior.CLIP


def test_no_bodies_is_unhindered():
    body = mover()
    vel = Vec2(0.3, -0.2)
    result = clip_move(body, vel, [])
    assert result == Unhindered(body.center() + vel)


def test_far_block_is_unhindered():
    body = mover()
    vel = Vec2(0.5, 0.0)
    block = Square(Vec2(5.5, 0.5))
    result = clip_move(body, vel, [block])
    assert isinstance(result, Unhindered)
    assert result.new_pos == body.center() + vel


def test_moving_right_into_block_stops_short():
    body = mover()
    block = Square(Vec2(2.5, 0.5))
    result = clip_move(body, Vec2(2.0, 0.0), [block])
    assert isinstance(result, Clipped)
    assert result.other_body is block
    left_face = block.center().x - block.half_extent()
    gap = left_face - (result.new_pos.x + body.half_extent())
    assert gap == pytest.approx(0.005)
    assert result.new_pos.y == body.center().y
    assert result.normal.x < 0.0
    assert result.normal.y == 0.0


def test_falling_onto_floor_gives_upward_normal():
    body = mover(0.5, 0.5)
    floor = Square(Vec2(0.5, 2.5))
    result = clip_move(body, Vec2(0.0, 3.0), [floor])
    assert isinstance(result, Clipped)
    assert result.normal.y < 0.0
    assert result.new_pos.y + body.half_extent() < floor.center().y - floor.half_extent()


def test_moving_away_is_unhindered():
    body = mover()
    block = Square(Vec2(2.5, 0.5))
    vel = Vec2(-1.0, 0.0)
    result = clip_move(body, vel, [block])
    assert result == Unhindered(body.center() + vel)
    assert result.new_pos == Vec2(-0.5, 0.5)


def test_overlap_backs_off_along_velocity():
    body = mover(1.0, 0.5)
    block = Square(Vec2(1.5, 0.5))
    vel = Vec2(0.2, 0.0)
    result = clip_move(body, vel, [block])
    assert isinstance(result, Clipped)
    expected = body.center() - vel.normalize_or_zero() * 0.005
    assert result.new_pos.x == pytest.approx(expected.x)
    assert result.new_pos.y == pytest.approx(expected.y)


def test_cast_box_miss_without_motion():
    assert cast_box(Vec2(0.0, 0.0), Vec2(), 0.45, Vec2(3.0, 0.0), 0.5) is None


def test_cast_box_overlap_is_time_zero():
    hit = cast_box(Vec2(0.0, 0.0), Vec2(), 0.45, Vec2(0.5, 0.0), 0.5)
    assert hit is not None
    toi, normal = hit
    assert toi == 0.0
    assert normal.x > 0.0 and normal.y == 0.0


def test_cast_box_hit_within_one_step():
    hit = cast_box(Vec2(0.0, 0.0), Vec2(0.0, 4.0), 0.45, Vec2(0.0, 2.0), 0.5)
    assert hit is not None
    toi, normal = hit
    assert 0.0 < toi <= 1.0
    assert normal.y > 0.0
    assert normal.x == 0.0


def test_cast_box_passing_beside_misses():
    assert cast_box(Vec2(0.0, 0.0), Vec2(5.0, 0.0), 0.45, Vec2(2.0, 3.0), 0.5) is None