"""Per-frame update functions for the entities of a level."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, List

from obby.clip import Body, Clipped, clip_move
from obby.model import BlockBody, Context, DirX, Entity, EntityBody, Event, EventKind, Keys
from obby.vector import Vec2

if TYPE_CHECKING:
    from obby.world import Game

GRAVITY = 60.0
MOVE_SPEED = 8.0
JUMP_SPEED = 20.0
DRAG_SPEED = 20.0
ACCELERATION = 16.0

COIN_SCORE = 100
COINS_PER_LIFE = 100
GOAL_SCORE = 1000
COIN_BOB_HEIGHT = 1.0 / 8.0

DEATH_PAUSE_SEC = 2.0
WIN_PAUSE_SEC = 2.0
CLOUD_GONE_SEC = 0.5
CLOUD_REAPPEAR_SEC = 1.0
CLOUD_HIDDEN_POS = Vec2(-2.0, -2.0)


def _apply_velocity(e: Entity, game: Game, ctx: Context, vel: Vec2) -> List[Body]:
    """Move ``e`` by ``vel`` for one frame, vertically then horizontally.

    Returns the bodies that stopped the entity, in the order they were hit.
    """
    dt = ctx.dt()
    others = game.bodies(e.cell())
    touched: List[Body] = []

    e.is_touching_floor = False
    result = clip_move(EntityBody(e), Vec2(0.0, vel.y) * dt, others)
    e.pos = result.new_pos
    if isinstance(result, Clipped):
        touched.append(result.other_body)
        if result.normal.y < 0.0:
            e.is_touching_floor = True
        e.vel = Vec2(e.vel.x, 0.0)

    result = clip_move(EntityBody(e), Vec2(vel.x, 0.0) * dt, others)
    e.pos = result.new_pos
    if isinstance(result, Clipped):
        touched.append(result.other_body)

    return touched


def update_coin(e: Entity, game: Game, ctx: Context) -> None:
    """Bob the coin up and down and let the player pick it up."""
    if game.pause:
        return
    bob = math.sin(game.elapsed_total_sec * math.pi * 2.0)
    e.pos = Vec2(e.pos.x, e.pos_start.y + bob * COIN_BOB_HEIGHT)

    player = game.entities.get(game.player)
    if player is None or (player.pos - e.pos).length() >= 1.0:
        return
    e.delete_me = True
    game.events.append(Event(EventKind.PICKUP_COIN))
    game.score += COIN_SCORE
    game.coins += 1
    if game.coins >= COINS_PER_LIFE:
        game.coins = 0
        game.lives_extra += 1
        game.events.append(Event(EventKind.PICKUP_EXTRA_LIFE))


def update_player_starting(e: Entity, game: Game, ctx: Context) -> None:
    """Show the level banner with the game paused, then hand over control."""
    game.pause = True
    game.center_text = f"LEVEL {game.level_current + 1}"
    if e.timer0.tick(ctx.dt()):
        game.center_text = ""
        e.update = update_player
        game.pause = False


def _steer(vx: float, pad_x: float, dt: float) -> float:
    if pad_x < 0.0:
        if vx > -MOVE_SPEED:
            vx += pad_x * MOVE_SPEED * dt * ACCELERATION
        return max(vx, -MOVE_SPEED)
    if pad_x > 0.0:
        if vx < MOVE_SPEED:
            vx += pad_x * MOVE_SPEED * dt * ACCELERATION
        return min(vx, MOVE_SPEED)
    drag = abs(vx) * dt * DRAG_SPEED
    if vx > 0.0:
        return max(vx - drag, 0.0)
    if vx < 0.0:
        return min(vx + drag, 0.0)
    return vx


def update_player(e: Entity, game: Game, ctx: Context) -> None:
    """Run, jump, fall, and check for winning or dying."""
    game.player = e.id
    dt = ctx.dt()
    pad = ctx.d_pad()
    vy = e.vel.y + GRAVITY * dt

    if ctx.is_key_pressed(Keys.SPACE) and e.is_touching_floor:
        vy = -JUMP_SPEED
        game.events.append(Event(EventKind.PLAYER_JUMP))
    if not ctx.is_key_down(Keys.SPACE) and vy < 0.0:
        vy = 0.0

    if pad.x < 0.0:
        e.dir_x = DirX.LEFT
    elif pad.x > 0.0:
        e.dir_x = DirX.RIGHT
    e.vel = Vec2(_steer(e.vel.x, pad.x, dt), vy)

    touched = _apply_velocity(e, game, ctx, e.vel)
    goal_touched = any(
        isinstance(body, EntityBody) and body.entity.is_goal for body in touched
    )
    dead = any(isinstance(body, BlockBody) and body.tile.is_deadly for body in touched)

    if goal_touched:
        game.center_text = "YOU WON!"
        e.update = update_player_won
        e.timer0.start(WIN_PAUSE_SEC)
        game.events.append(Event(EventKind.WON))
        game.score += GOAL_SCORE * (game.level_current + 1)
        return

    if e.pos.y > game.grid_height + 1.0:
        dead = True

    if dead:
        game.center_text = "YOU DIED!"
        e.update = update_player_dead
        e.timer0.start(DEATH_PAUSE_SEC)
        game.events.append(Event(EventKind.DIED))


def update_player_dead(e: Entity, game: Game, ctx: Context) -> None:
    """Wait, then restart the level or, with no lives left, the whole game."""
    game.pause = True
    if not e.timer0.tick(ctx.dt()):
        return
    e.delete_me = True
    whole_game = game.lives_extra == 0
    score = game.score
    game.restart(ctx, whole_game)
    if whole_game:
        game.events.append(Event(EventKind.GAME_OVER, score=score))
    else:
        game.lives_extra -= 1


def update_player_won(e: Entity, game: Game, ctx: Context) -> None:
    """Wait, then move on to the next level."""
    game.pause = True
    if e.timer0.tick(ctx.dt()):
        game.next_level(ctx)


def update_cloud(e: Entity, game: Game, ctx: Context) -> None:
    """Vanish a while after the player stands on the cloud, then come back."""
    player = game.entities.get(game.player)
    standing = (
        player is not None
        and (player.pos - e.pos).length() < 1.0
        and player.is_touching_floor
    )

    if e.pos_start != e.pos:
        if e.timer0.tick(ctx.dt()):
            e.pos = e.pos_start
            e.timer0.start(CLOUD_GONE_SEC)
    elif standing:
        if e.timer0.tick(ctx.dt()):
            e.pos = CLOUD_HIDDEN_POS
            e.timer0.start(CLOUD_REAPPEAR_SEC)
    else:
        e.timer0.start(CLOUD_GONE_SEC)