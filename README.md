# obby

A small tile-based platformer. You pick a character, then run and jump
through a series of levels. Collect coins along the way and reach the goal
to finish each level. Deadly tiles and falling off the bottom of the map
cost a life.

## Installing

```
pip install .
```

The game uses `pygame` for its window, drawing, sound and input. pip
installs it as a dependency.

## Running

```
obby
obby --root path/to/game
```

`--root` names the directory that holds `res/`. It defaults to the current
directory. The game reads these files under the root:

- `res/maps.txt` lists the level files in play order, one path per line.
- The levels themselves are in Tiled TMX format. Each one uses the shared tileset `res/maps/tileset.tsx`.
- `res/imgs/tileset.png` is the sprite atlas. It is cut into 20 columns by 20 rows.
- `res/sfx.csv` maps sound keys to sound files. Each line holds a key followed by one or more comma-separated paths. When several sounds share a key, one is picked at random each time. The keys used are `coin`, `win`, `lost`, `extra_life` and `jump`.

A tile's type in the tileset (its `class` or `type` attribute) is a list of
words separated by whitespace. These words are recognised: `block`,
`player`, `goal`, `foreground`, `entity`, `coin`, `deadly` and `cloud`.
Only the first layer of a map is read, and only if it is a tile layer.

## Controls

| Action            | Keyboard              | Gamepad                  |
|-------------------|-----------------------|--------------------------|
| Move              | A / D, Left / Right   | D-pad (hat)              |
| Jump (hold)       | Space, Up             | Button 0 or 1            |
| Fullscreen toggle | Left Alt + Enter      |                          |
| Start / skip level| F1                    |                          |
| Character select  | F2                    |                          |

On the title screen and the game-over screen, any key continues.

## Rules

- You start with 3 extra lives.
- Each coin is worth 100 points.
- Every 100 coins give you an extra life.
- Reaching the goal of level *n* scores 1000 × *n* points.
- A cloud vanishes shortly after you stand on it, then comes back.
- If you die with no extra lives left, the game is over and your final score is shown.

## Using the engine

The game logic does not touch pygame, so you can drive it without a window:

1. Implement `obby.model.Context`. It supplies the frame time, the input state, the map list and map lookup. Map lookup returns an `obby.model.MapResult`.
2. Provide an `obby.model.Map` for each level. `obby.tmx.parse_tmx` builds an `obby.tmx.TmxMap` from TMX data.
3. Create an `obby.world.Game`, call its `init`, then call its `update` once per frame. Read `Game.events` after each frame.

`obby.app.step_app` advances the whole application one frame at a time:
the title screen, character selection, play and game over. It works with
the game context in `obby.app.GameContext`.

`obby.clip.clip_move` moves any `obby.clip.Body` by a velocity and stops it
against other bodies. It is the swept axis-aligned box collision used for
all movement.

## Limitations

- There is no save game and no high-score table. The score lasts only for the current run.
- A map whose TMX cannot be read is treated as not found. A missing map or tileset file raises an error instead.

## Tests

```
pip install .[test]
pytest
```