"""Application states, the host context and the per-frame state machine."""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Set, Tuple, Union

from obby.assets import Assets
from obby.model import Context, EventKind, Keys, MapResult
from obby.vector import Vec2
from obby.world import Game

CHARACTERS = 5
TITLE_INPUT_DELAY_SEC = 1.0
SCORE_COUNT_SEC = 4.0

_U8_MOD = 256

_EVENT_SOUNDS = {
    EventKind.PICKUP_COIN: "coin",
    EventKind.WON: "win",
    EventKind.DIED: "lost",
    EventKind.PICKUP_EXTRA_LIFE: "extra_life",
    EventKind.PLAYER_JUMP: "jump",
}


@dataclass(frozen=True)
class TitleState:
    """The title screen; input is ignored until it has shown for a second."""

    elapsed: float = 0.0


@dataclass(frozen=True)
class PlayingState:
    """A level is being played."""


@dataclass(frozen=True)
class GameOverState:
    """The final score, counted up on screen until it reaches ``score``."""

    score: float
    score_display: float = 0.0


@dataclass(frozen=True)
class CharacterSelectionState:
    """Choosing a player skin."""

    selection: int = 0


AppState = Union[TitleState, PlayingState, GameOverState, CharacterSelectionState]


@dataclass(eq=False)
class GameContext(Context):
    """The host side of the game: loaded assets and this frame's input."""

    map_names: List[str]
    assets: Assets
    frame_time: float = 0.0
    pad: Vec2 = field(default_factory=Vec2)
    keys_down: Set[Keys] = field(default_factory=set)
    keys_pressed: Set[Keys] = field(default_factory=set)
    background: Tuple[int, int, int] = (255, 255, 255)
    rng: random.Random = field(default_factory=random.Random)

    def play_sound(self, key: str, looped: bool, volume: float) -> None:
        """Play one of the sounds registered under ``key``, chosen at random."""
        sounds: List[Any] = self.assets.sfx.get(key, [])
        if not sounds:
            return
        sound = sounds[self.rng.randrange(len(sounds))]
        sound.set_volume(volume)
        sound.play(loops=-1 if looped else 0)

    def map(self, name: str) -> MapResult:
        return self.assets.load_map(name)

    def dt(self) -> float:
        return self.frame_time

    def d_pad(self) -> Vec2:
        return self.pad

    def is_key_down(self, key: Keys) -> bool:
        return key in self.keys_down

    def is_key_pressed(self, key: Keys) -> bool:
        return key in self.keys_pressed

    def is_any_key_pressed(self) -> bool:
        return bool(self.keys_pressed)

    def map_list(self) -> List[str]:
        return self.map_names

    def rand_f32(self) -> float:
        return self.rng.random()


def _lines(text: str) -> List[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_map_list(text: str) -> List[str]:
    """Map paths, one per line, in play order."""
    return _lines(text)


def parse_sfx_csv(text: str) -> Dict[str, List[str]]:
    """Sound keys mapped to their sound file paths, one key per line."""
    table: Dict[str, List[str]] = {}
    for line in _lines(text):
        key, *paths = line.split(",")
        table[key] = [path.strip() for path in paths]
    return table


def process_events(app_state: AppState, game: Game, ctx: GameContext) -> AppState:
    """Play the sounds for the game's events; game over switches the app state."""
    for event in game.events:
        if event.kind is EventKind.GAME_OVER:
            app_state = GameOverState(score=float(event.score), score_display=0.0)
        else:
            ctx.play_sound(_EVENT_SOUNDS[event.kind], False, 1.0)
    return app_state


def _step_selection(
    state: CharacterSelectionState, game: Game, ctx: GameContext
) -> Tuple[AppState, Game]:
    if ctx.is_key_pressed(Keys.SPACE):
        fresh = Game(skin_chosen=state.selection)
        fresh.init(ctx)
        return PlayingState(), fresh
    selection = state.selection
    if ctx.is_key_pressed(Keys.RIGHT):
        selection = (selection + 1) % _U8_MOD
    elif ctx.is_key_pressed(Keys.LEFT):
        selection = (selection - 1) % _U8_MOD
    if selection >= CHARACTERS:
        selection = 0
    return CharacterSelectionState(selection), game


def step_app(app_state: AppState, game: Game, ctx: GameContext) -> Tuple[AppState, Game]:
    """Advance the application by one frame; returns the new state and game."""
    if isinstance(app_state, TitleState):
        elapsed = app_state.elapsed + ctx.dt()
        if elapsed > TITLE_INPUT_DELAY_SEC and ctx.is_any_key_pressed():
            return CharacterSelectionState(0), game
        return TitleState(elapsed), game

    if isinstance(app_state, PlayingState):
        game.update(ctx)
        new_state = process_events(app_state, game, ctx)
        game.events.clear()
        return new_state, game

    if isinstance(app_state, GameOverState):
        shown = app_state.score_display + ctx.dt() * app_state.score / SCORE_COUNT_SEC
        if shown >= app_state.score:
            if ctx.is_any_key_pressed():
                return TitleState(0.0), game
            shown = app_state.score
        return replace(app_state, score_display=shown), game

    if isinstance(app_state, CharacterSelectionState):
        return _step_selection(app_state, game, ctx)

    raise TypeError(f"unknown application state: {app_state!r}")