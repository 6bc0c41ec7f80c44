"""The window, the input devices and the main loop."""

from __future__ import annotations

import argparse
from enum import Enum
from pathlib import Path
from typing import Collection, List, Optional, Sequence, Set, Tuple

import pygame

from obby import render
from obby.app import (
    CharacterSelectionState,
    GameContext,
    GameOverState,
    PlayingState,
    TitleState,
    parse_map_list,
    parse_sfx_csv,
    step_app,
)
from obby.assets import Assets, Atlas
from obby.model import Keys
from obby.vector import Vec2
from obby.world import Game

WINDOW_TITLE = "HØRUP'S OBBY"
MAX_FRAME_SEC = 0.1
TITLE_INPUT_DELAY_SEC = 1.0

_WATCHED_KEYS = (pygame.K_SPACE, pygame.K_UP, pygame.K_a, pygame.K_LEFT, pygame.K_d, pygame.K_RIGHT)


class _PadButton(Enum):
    DPAD_LEFT = "dpad_left"
    DPAD_RIGHT = "dpad_right"
    ACTION_RIGHT = "action_right"
    ACTION_DOWN = "action_down"


def collect_input(
    down: Collection[object], pressed: Collection[object]
) -> Tuple[Set[Keys], Set[Keys], Vec2]:
    """Turn held and newly pressed keys and pad buttons into game input.

    Returns the keys held, the keys pressed this frame and the direction pad.
    """
    keys_down: Set[Keys] = set()
    keys_pressed: Set[Keys] = set()
    pad_x = 0.0

    if pygame.K_SPACE in down or pygame.K_UP in down:
        keys_down.add(Keys.SPACE)
    if pygame.K_SPACE in pressed or pygame.K_UP in pressed:
        keys_pressed.add(Keys.SPACE)

    if pygame.K_a in down or pygame.K_LEFT in down:
        pad_x = -1.0
        keys_down.add(Keys.LEFT)
    elif pygame.K_d in down or pygame.K_RIGHT in down:
        pad_x = 1.0
        keys_down.add(Keys.RIGHT)
    if pygame.K_a in pressed or pygame.K_LEFT in pressed:
        pad_x = -1.0
        keys_pressed.add(Keys.LEFT)
    elif pygame.K_d in pressed or pygame.K_RIGHT in pressed:
        pad_x = 1.0
        keys_pressed.add(Keys.RIGHT)

    for button in _PadButton:
        if button in down:
            if button is _PadButton.DPAD_LEFT:
                pad_x = -1.0
                keys_down.add(Keys.LEFT)
            elif button is _PadButton.DPAD_RIGHT:
                pad_x = 1.0
                keys_down.add(Keys.RIGHT)
            else:
                keys_down.add(Keys.SPACE)
        if button in pressed:
            if button is _PadButton.DPAD_LEFT:
                keys_pressed.add(Keys.LEFT)
            elif button is _PadButton.DPAD_RIGHT:
                keys_pressed.add(Keys.RIGHT)
            else:
                keys_pressed.add(Keys.SPACE)

    return keys_down, keys_pressed, Vec2(pad_x, 0.0).normalize_or_zero()


def load_context(root: Path) -> GameContext:
    """Load the map list, sounds and tileset found under ``root``."""
    root = Path(root)
    map_names = parse_map_list((root / "res/maps.txt").read_text(encoding="utf-8"))
    table = parse_sfx_csv((root / "res/sfx.csv").read_text(encoding="utf-8"))

    sfx = {}
    for key, paths in table.items():
        sounds = []
        for path in paths:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            sounds.append(pygame.mixer.Sound(str(root / path)))
        sfx[key] = sounds

    texture = pygame.image.load(str(root / "res/imgs/tileset.png"))
    return GameContext(
        map_names=map_names,
        assets=Assets(tileset=Atlas(20, 20, texture), sfx=sfx, root=root),
        background=render.WHITE,
    )


def _pad_buttons() -> Set[_PadButton]:
    held: Set[_PadButton] = set()
    for i in range(pygame.joystick.get_count()):
        stick = pygame.joystick.Joystick(i)
        if stick.get_numhats() > 0:
            hat_x, _ = stick.get_hat(0)
            if hat_x < 0:
                held.add(_PadButton.DPAD_LEFT)
            elif hat_x > 0:
                held.add(_PadButton.DPAD_RIGHT)
        buttons = stick.get_numbuttons()
        if buttons > 0 and stick.get_button(0):
            held.add(_PadButton.ACTION_DOWN)
        if buttons > 1 and stick.get_button(1):
            held.add(_PadButton.ACTION_RIGHT)
    return held


def _draw(target: pygame.Surface, app_state: object, game: Game, ctx: GameContext, flashing: bool) -> None:
    if isinstance(app_state, TitleState):
        render.draw_title(target, flashing if app_state.elapsed > TITLE_INPUT_DELAY_SEC else False)
    elif isinstance(app_state, PlayingState):
        render.draw_game(target, game, ctx)
    elif isinstance(app_state, GameOverState):
        shown = flashing if app_state.score == app_state.score_display else False
        render.draw_gameover(target, shown, int(app_state.score_display))
    elif isinstance(app_state, CharacterSelectionState):
        render.draw_character_selection(target, app_state.selection, ctx.assets.tileset)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open the game window and run until it is closed."""
    parser = argparse.ArgumentParser(prog="obby", description="A platform game about not dying.")
    parser.add_argument("--root", type=Path, default=Path("."), help="directory that holds res/")
    args = parser.parse_args(argv)

    pygame.init()
    try:
        screen = pygame.display.set_mode((render.TARGET_WIDTH, render.TARGET_HEIGHT), pygame.RESIZABLE)
        pygame.display.set_caption(WINDOW_TITLE)
        target = pygame.Surface((render.TARGET_WIDTH, render.TARGET_HEIGHT))

        ctx = load_context(args.root)
        game = Game()
        game.init(ctx)
        app_state: object = TitleState(0.0)

        clock = pygame.time.Clock()
        secs = 0.0
        frame_sec = 0.0
        pad_before: Set[_PadButton] = set()
        while True:
            pressed_keys: Set[int] = set()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return 0
                if event.type == pygame.KEYDOWN:
                    pressed_keys.add(event.key)
            held = pygame.key.get_pressed()
            down_keys: List[int] = [key for key in _WATCHED_KEYS if held[key]]
            pad_down = _pad_buttons()
            pad_pressed = pad_down - pad_before
            pad_before = pad_down

            flashing = int(secs * 3.0) % 2 == 0
            if held[pygame.K_LALT] and pygame.K_RETURN in pressed_keys:
                pygame.display.toggle_fullscreen()
            if pygame.K_F1 in pressed_keys:
                if not isinstance(app_state, PlayingState):
                    app_state = PlayingState()
                else:
                    game.next_level(ctx)
            if pygame.K_F2 in pressed_keys:
                app_state = CharacterSelectionState(0)

            ctx.frame_time = min(frame_sec, MAX_FRAME_SEC)
            ctx.keys_down, ctx.keys_pressed, ctx.pad = collect_input(
                set(down_keys) | pad_down, pressed_keys | pad_pressed
            )

            app_state, game = step_app(app_state, game, ctx)  # type: ignore[arg-type]
            _draw(target, app_state, game, ctx, flashing)

            screen.fill(render.BLACK)
            render.blit_render_target(screen, target)
            ctx.assets.load_pending()
            pygame.display.flip()

            frame_sec = clock.tick(60) / 1000.0
            secs += frame_sec
    finally:
        pygame.quit()