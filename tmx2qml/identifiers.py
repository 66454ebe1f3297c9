"""
Canonical identifiers for layers, tiles and animations.

Identifiers double as QML ids/property names and as image filenames, so
the same scheme is used everywhere:

    layer "Ground Layer"              -> ground_layer
    tileset "Base", tile 3            -> base_3        (file: base_3.png)
    tileset "Water", frames 4, 5, 6   -> water_4_5_6
"""

from pathlib import Path
from typing import Iterable, Union

from tmx_manager import Frame


def normalize(name: str) -> str:
    return name.lower().replace(" ", "_")


def layer_id(name: str) -> str:
    return normalize(name)


def tileset_id(name: str) -> str:
    return normalize(name)


def tile_id(tileset_name: str, tile: int) -> str:
    return f"{tileset_id(tileset_name)}_{tile}"


def tile_filename(tileset_name: str, tile: int) -> str:
    return f"{tile_id(tileset_name, tile)}.png"


def animation_id(tileset_name: str, frames: Iterable[Frame]) -> str:
    """Tileset id followed by the tile id of every frame, in order."""
    return tileset_id(tileset_name) + "".join(f"_{frame.tile_id}" for frame in frames)


def map_prefix(map_path: Union[str, Path]) -> str:
    """
    Derive the output name prefix from the map filename.

    Only the first character of the stem is upper-cased:
    "maps/ground.tmx" -> "Ground", "my level.tmx" -> "My level".
    """
    stem = Path(map_path).name.split(".")[0]
    return stem[:1].upper() + stem[1:]


def scene_filename(prefix: str) -> str:
    return f"{prefix}Map.qml"


def manifest_filename(prefix: str) -> str:
    return f"{prefix}Map.qrc"
