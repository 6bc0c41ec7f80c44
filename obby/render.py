"""Drawing the title, character selection, level and game-over screens."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Iterable, Tuple

import pygame

from obby.app import CHARACTERS, GameContext
from obby.assets import Atlas
from obby.model import EntityVariant, DirX
from obby.world import Game

TARGET_WIDTH = 768 * 2
TARGET_HEIGHT = 512 * 2

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RED = (230, 41, 55)
DARKGRAY = (80, 80, 80)

SKIN_INDEX = (120.0, 121.0, 122.0, 123.0, 124.0)
CHARACTER_NAMES = ("WILLIAM", "VIKTOR", "SIGGA", "LOUISE", "SØREN")

_HUD_SHADE = (0, 0, 0, 255 // 4 * 2)
_MARGIN = 16.0
_U32_MAX = 0xFFFFFFFF

_ENTITY_INDEX = {
    EntityVariant.UNKNOWN: 1.0,
    EntityVariant.GOAL: 2.0,
    EntityVariant.COIN: 21.0,
    EntityVariant.CLOUD: 81.0,
}

Color = Tuple[int, int, int]


def _to_u32(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U32_MAX:
        return _U32_MAX
    return math.trunc(value)


@lru_cache(maxsize=None)
def _font(size: int) -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, max(1, size))


def _measure(text: str, size: float) -> Tuple[int, int]:
    return _font(int(size)).size(text)


def _draw_text(surface: pygame.Surface, text: str, x: float, y: float, size: float, color: Color) -> None:
    """Draw ``text`` with its baseline at ``y``."""
    font = _font(int(size))
    image = font.render(text, True, color)
    surface.blit(image, (math.floor(x), math.floor(y - font.get_ascent())))


def _shade(surface: pygame.Surface, x: float, y: float, w: float, h: float) -> None:
    width, height = round(w), round(h)
    if width <= 0 or height <= 0:
        return
    overlay = pygame.Surface((width, height), pygame.SRCALPHA)
    overlay.fill(_HUD_SHADE)
    surface.blit(overlay, (math.floor(x), math.floor(y)))


def _draw_centered_lines(surface: pygame.Surface, title: str, subtitle: str, flashing: bool) -> None:
    width, height = surface.get_size()
    surface.fill(BLACK)

    font_size = height / 8.0
    mw, mh = _measure(title, font_size)
    _draw_text(surface, title, width / 2.0 - mw / 2.0, height / 2.0 - mh, font_size, WHITE)

    font_size = height / 16.0
    mw, mh = _measure(subtitle, font_size)
    y = height / 2.0 - mh + font_size / 2.0
    _draw_text(surface, subtitle, width / 2.0 - mw / 2.0, y, font_size, WHITE)

    if flashing:
        prompt = "PRESS ANY BUTTON TO CONTINUE"
        mw, mh = _measure(prompt, font_size)
        y = height / 2.0 - mh + font_size * 3.0
        _draw_text(surface, prompt, width / 2.0 - mw / 2.0, y, font_size, RED)


def camera_offset_x(
    player_x: float, cell_size_px: float, target_width: float, grid_width_px: float
) -> float:
    """Horizontal scroll that centres the player, kept inside a wide level."""
    offset = player_x * cell_size_px - target_width / 2.0
    if target_width < grid_width_px:
        offset = min(max(offset, 0.0), grid_width_px - target_width)
    return offset


def draw_atlas(
    surface: pygame.Surface,
    atlas: Atlas,
    x: float,
    y: float,
    index: float,
    color: Color,
    dest_size: Iterable[float],
    flip_x: bool,
    flip_y: bool,
) -> pygame.Rect:
    """Draw one atlas cell, scaled to ``dest_size`` and tinted by ``color``."""
    source = atlas.index(index)
    texture: pygame.Surface = atlas.texture  # type: ignore[assignment]
    rect = pygame.Rect(
        round(source.x), round(source.y), max(1, round(source.w)), max(1, round(source.h))
    ).clip(texture.get_rect())
    dest_w, dest_h = dest_size
    dest = pygame.Rect(math.floor(x), math.floor(y), max(1, round(dest_w)), max(1, round(dest_h)))
    if rect.width == 0 or rect.height == 0:
        return dest
    piece = pygame.transform.scale(texture.subsurface(rect), dest.size)
    if flip_x or flip_y:
        piece = pygame.transform.flip(piece, flip_x, flip_y)
    if tuple(color) != WHITE:
        piece.fill((*color, 255), special_flags=pygame.BLEND_RGBA_MULT)
    surface.blit(piece, dest.topleft)
    return dest


def draw_title(surface: pygame.Surface, flashing: bool) -> None:
    _draw_centered_lines(surface, "HØRUP'S OBBY", "A GAME ABOUT NOT DYING", flashing)


def draw_gameover(surface: pygame.Surface, flashing: bool, score: int) -> None:
    _draw_centered_lines(surface, "GAME OVER", f"FINAL SCORE:{score}", flashing)


def draw_character_selection(surface: pygame.Surface, selection: int, tileset: Atlas) -> None:
    width, height = surface.get_size()
    surface.fill(BLACK)
    m = width / (CHARACTERS + 1)

    font_size = height / 8.0
    heading = "CHOOSE CHARACTER"
    mw, mh = _measure(heading, font_size)
    _draw_text(surface, heading, width / 2.0 - mw / 2.0, height / 4.0 - mh, font_size, WHITE)

    name_size = height / 16.0
    for col, (skin, name) in enumerate(zip(SKIN_INDEX, CHARACTER_NAMES)):
        color = WHITE if selection == col else DARKGRAY
        x = m * col + m / 2.0
        y = height / 2.0 - m / 2.0
        draw_atlas(surface, tileset, x, y, skin, color, (m, m), False, False)
        mw, mh = _measure(name, name_size)
        _draw_text(surface, name, x + m / 2.0 - mw / 2.0, y + m + mh * 2.0, name_size, color)


def draw_grid(
    surface: pygame.Surface,
    game: Game,
    atlas: Atlas,
    camera_offset_x_px: float,
    cell_size_px: float,
    is_foreground: bool,
) -> int:
    """Draw the visible tiles of one layer; returns how many were drawn."""
    target_width = surface.get_width()
    start_x = _to_u32(camera_offset_x_px / cell_size_px)
    end_x = _to_u32((camera_offset_x_px + target_width) / cell_size_px) + 1
    drawn = 0
    for y in range(game.grid_height):
        for x in range(start_x, end_x):
            tile = game.grid.get((x, y))
            if tile is None or tile.is_foreground != is_foreground:
                continue
            draw_atlas(
                surface,
                atlas,
                x * cell_size_px - camera_offset_x_px,
                y * cell_size_px,
                float(tile.variant),
                WHITE,
                (cell_size_px, cell_size_px),
                False,
                False,
            )
            drawn += 1
    return drawn


def draw_game(surface: pygame.Surface, game: Game, ctx: GameContext) -> float:
    """Draw the level, its entities and the HUD; returns the camera offset used."""
    width, height = surface.get_size()
    background = game.map_current.background() if game.map_current is not None else BLACK
    surface.fill(background)
    if game.grid_height == 0:
        draw_hud(surface, game, ctx)
        return 0.0

    cell_size_px = height / game.grid_height
    grid_width_px = game.grid_width * cell_size_px
    player = game.entities.get(game.player)
    player_x = player.pos.x if player is not None else 0.0
    offset = camera_offset_x(player_x, cell_size_px, width, grid_width_px)

    tileset = ctx.assets.tileset
    draw_grid(surface, game, tileset, offset, cell_size_px, False)
    for e in game.entities.values():
        if e.variant is EntityVariant.PLAYER:
            index = SKIN_INDEX[e.skin]
        else:
            index = _ENTITY_INDEX[e.variant]
        draw_atlas(
            surface,
            tileset,
            (e.pos.x - 0.5) * cell_size_px - offset,
            (e.pos.y - 0.5) * cell_size_px,
            index,
            WHITE,
            (cell_size_px, cell_size_px),
            e.dir_x is DirX.LEFT,
            False,
        )
    draw_grid(surface, game, tileset, offset, cell_size_px, True)
    draw_hud(surface, game, ctx)
    return offset


def draw_hud(surface: pygame.Surface, game: Game, ctx: GameContext) -> None:
    """Banner text, and the bar with score, lives, coins and level."""
    width, height = surface.get_size()
    font_size = height / 8.0
    if game.center_text:
        mw, mh = _measure(game.center_text, font_size)
        x = width / 2.0 - mw / 2.0
        y = height / 2.0 - mh
        _shade(surface, 0.0, y - _MARGIN, width, mh + _MARGIN * 2.0)
        _draw_text(surface, game.center_text, x, y + mh, font_size, WHITE)

    font_size = height / 16.0
    _shade(surface, 0.0, 0.0, width, font_size)

    text = f"SCORE: {game.score}"
    mw, mh = _measure(text, font_size)
    _draw_text(surface, text, _MARGIN, _MARGIN + mh, font_size, WHITE)

    text = f"LIVES: {game.lives_extra}"
    mw, mh = _measure(text, font_size)
    _draw_text(surface, text, width / 3.0 - mw / 2.0, _MARGIN + mh, font_size, WHITE)

    text = f"COINS: {game.coins}"
    mw, mh = _measure(text, font_size)
    _draw_text(surface, text, width / 2.0, _MARGIN + mh, font_size, WHITE)

    text = f"LEVEL {game.level_current + 1} OF {len(ctx.map_list())}"
    mw, mh = _measure(text, font_size)
    _draw_text(surface, text, width - mw - _MARGIN, _MARGIN + mh, font_size, WHITE)


def blit_render_target(screen: pygame.Surface, target: pygame.Surface) -> pygame.Rect:
    """Scale ``target`` onto ``screen`` keeping its aspect ratio; returns where it went."""
    screen_w, screen_h = screen.get_size()
    target_w, target_h = target.get_size()
    aspect = target_w / target_h
    if screen_w / aspect > screen_h:
        size = (round(screen_h * aspect), screen_h)
        pos = ((screen_w - size[0]) // 2, 0)
    else:
        size = (screen_w, round(screen_w / aspect))
        pos = (0, (screen_h - size[1]) // 2)
    try:
        scaled = pygame.transform.smoothscale(target, size)
    except ValueError:
        scaled = pygame.transform.scale(target, size)
    screen.blit(scaled, pos)
    return pygame.Rect(pos, size)