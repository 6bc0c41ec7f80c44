"""Reading level maps saved in the Tiled TMX format."""

from __future__ import annotations

import base64
import binascii
import gzip
import posixpath
import struct
import xml.etree.ElementTree as ET
import zlib
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple, Union

from obby.model import Map, MapTile

_FLIP_FLAGS = 0x80000000 | 0x40000000 | 0x20000000
_LAYER_TAGS = ("layer", "objectgroup", "imagelayer", "group")

_TYPE_FLAGS = {
    "block": "is_block",
    "player": "is_player",
    "goal": "is_goal",
    "foreground": "is_foreground",
    "entity": "is_entity",
    "coin": "is_coin",
    "deadly": "is_deadly",
    "cloud": "is_cloud",
}

Cell = Tuple[int, Optional[str]]


class TmxError(Exception):
    """A map or tileset could not be read."""


@dataclass(frozen=True)
class _Tileset:
    first_gid: int
    user_types: Dict[int, str]


class TmxMap(Map):
    """A level read from a TMX file; only its first layer holds tiles."""

    def __init__(
        self,
        width: int,
        height: int,
        tiles: Dict[Tuple[int, int], Cell],
        background_color: Optional[Tuple[int, int, int]] = None,
    ) -> None:
        self._width = width
        self._height = height
        self._tiles = dict(tiles)
        self._background_color = background_color

    def background(self) -> Tuple[int, int, int]:
        return self._background_color if self._background_color is not None else (0, 0, 0)

    def width(self) -> int:
        return self._width

    def height(self) -> int:
        return self._height

    def tile(self, x: int, y: int) -> MapTile:
        cell = self._tiles.get((x, y))
        if cell is None:
            return MapTile()
        local_id, user_type = cell
        flags = {
            _TYPE_FLAGS[word]: True
            for word in (user_type or "").split()
            if word in _TYPE_FLAGS
        }
        return MapTile(variant=local_id, **flags)


def _parse_xml(data: Union[bytes, str], what: str) -> ET.Element:
    try:
        return ET.fromstring(data)
    except ET.ParseError as exc:
        raise TmxError(f"{what}: {exc}") from exc


def _int_attr(elem: ET.Element, name: str, default: Optional[int] = None) -> int:
    value = elem.get(name)
    if value is None:
        if default is None:
            raise TmxError(f"<{elem.tag}> lacks the attribute {name!r}")
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise TmxError(f"<{elem.tag}> has a bad {name!r}: {value!r}") from exc


def _parse_color(text: str) -> Tuple[int, int, int]:
    digits = text.strip().lstrip("#")
    if len(digits) == 8:
        digits = digits[2:]
    if len(digits) != 6:
        raise TmxError(f"bad colour {text!r}")
    try:
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError as exc:
        raise TmxError(f"bad colour {text!r}") from exc


def _resolve(path: str, source: str) -> str:
    base = posixpath.dirname(path.replace("\\", "/"))
    source = source.replace("\\", "/")
    return posixpath.join(base, source) if base else source


def _user_types(tileset: ET.Element) -> Dict[int, str]:
    types: Dict[int, str] = {}
    for tile in tileset.findall("tile"):
        kind = tile.get("class") or tile.get("type")
        if kind:
            types[_int_attr(tile, "id")] = kind
    return types


def _load_tilesets(
    root: ET.Element, path: str, resources: Mapping[str, bytes]
) -> List[_Tileset]:
    tilesets = []
    for elem in root.findall("tileset"):
        first_gid = _int_attr(elem, "firstgid")
        source = elem.get("source")
        if source:
            key = _resolve(path, source)
            data = resources.get(key)
            if data is None:
                raise TmxError(f"resource not found: {key}")
            external = _parse_xml(data, key)
            if external.tag != "tileset":
                raise TmxError(f"{key} is not a tileset")
            types = _user_types(external)
        else:
            types = _user_types(elem)
        tilesets.append(_Tileset(first_gid, types))
    return sorted(tilesets, key=lambda t: t.first_gid)


def _decode_gids(
    elem: ET.Element, encoding: Optional[str], compression: Optional[str]
) -> List[int]:
    if encoding is None:
        if compression:
            raise TmxError("compression needs an encoding")
        return [_int_attr(tile, "gid", 0) for tile in elem.findall("tile")]
    text = elem.text or ""
    if encoding == "csv":
        try:
            return [int(part) for part in (p.strip() for p in text.split(",")) if part]
        except ValueError as exc:
            raise TmxError(f"bad csv tile data: {exc}") from exc
    if encoding != "base64":
        raise TmxError(f"unsupported encoding {encoding!r}")
    try:
        raw = base64.b64decode("".join(text.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise TmxError(f"bad base64 tile data: {exc}") from exc
    try:
        if compression == "zlib":
            raw = zlib.decompress(raw)
        elif compression == "gzip":
            raw = gzip.decompress(raw)
        elif compression:
            raise TmxError(f"unsupported compression {compression!r}")
    except (zlib.error, OSError, EOFError) as exc:
        raise TmxError(f"bad compressed tile data: {exc}") from exc
    if len(raw) % 4:
        raise TmxError("tile data is not a whole number of tiles")
    return [gid for (gid,) in struct.iter_unpack("<I", raw)]


def _lookup(gid: int, tilesets: List[_Tileset]) -> Cell:
    for tileset in reversed(tilesets):
        if tileset.first_gid <= gid:
            local_id = gid - tileset.first_gid
            return local_id, tileset.user_types.get(local_id)
    raise TmxError(f"no tileset holds tile {gid}")


def _place(
    cells: Dict[Tuple[int, int], Cell],
    origin: Tuple[int, int],
    width: int,
    height: int,
    gids: List[int],
    tilesets: List[_Tileset],
) -> None:
    if width <= 0 or height <= 0:
        return
    if len(gids) < width * height:
        raise TmxError(f"expected {width * height} tiles, found {len(gids)}")
    for i, gid in enumerate(gids[: width * height]):
        gid &= ~_FLIP_FLAGS & 0xFFFFFFFF
        if gid == 0:
            continue
        row, col = divmod(i, width)
        cells[(origin[0] + col, origin[1] + row)] = _lookup(gid, tilesets)


def _read_layer(
    layer: ET.Element, map_width: int, map_height: int, tilesets: List[_Tileset]
) -> Dict[Tuple[int, int], Cell]:
    data = layer.find("data")
    if data is None:
        raise TmxError("tile layer has no data")
    encoding = data.get("encoding")
    compression = data.get("compression")
    cells: Dict[Tuple[int, int], Cell] = {}
    chunks = data.findall("chunk")
    if chunks:
        for chunk in chunks:
            _place(
                cells,
                (_int_attr(chunk, "x"), _int_attr(chunk, "y")),
                _int_attr(chunk, "width"),
                _int_attr(chunk, "height"),
                _decode_gids(chunk, encoding, compression),
                tilesets,
            )
    else:
        _place(
            cells,
            (0, 0),
            _int_attr(layer, "width", map_width),
            _int_attr(layer, "height", map_height),
            _decode_gids(data, encoding, compression),
            tilesets,
        )
    return cells


def parse_tmx(
    data: Union[bytes, str],
    path: str,
    resources: Optional[Mapping[str, bytes]] = None,
) -> TmxMap:
    """Read a TMX map; external tilesets are looked up in ``resources``.

    Tileset sources are resolved against the directory of ``path``.
    """
    resources = resources or {}
    root = _parse_xml(data, path)
    if root.tag != "map":
        raise TmxError(f"{path} is not a map")
    width = _int_attr(root, "width")
    height = _int_attr(root, "height")
    color_text = root.get("backgroundcolor")
    background = _parse_color(color_text) if color_text else None
    tilesets = _load_tilesets(root, path, resources)

    layers = [child for child in root if child.tag in _LAYER_TAGS]
    tiles: Dict[Tuple[int, int], Cell] = {}
    if layers and layers[0].tag == "layer":
        tiles = _read_layer(layers[0], width, height, tilesets)
    return TmxMap(width, height, tiles, background)