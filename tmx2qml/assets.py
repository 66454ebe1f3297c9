"""
Collection of the tile images a scene needs.

Every tile placed statically, and every frame of every distinct animation,
must exist as its own PNG next to the scene. Members are (tileset, tile id)
references: two tiles with identical pixels in different places are still
two assets. Tilesets hash by identity.
"""

from typing import Iterable, List, Set, Tuple

from tmx_manager import Frame, Tileset
from .identifiers import tile_filename

TileRef = Tuple[Tileset, int]


class AssetCollector:

    def __init__(self):
        self._tiles: Set[TileRef] = set()

    def add(self, tileset: Tileset, tile_id: int):
        self._tiles.add((tileset, tile_id))

    def add_animation(self, tileset: Tileset, frames: Iterable[Frame]):
        """Register every frame of an animation."""
        for frame in frames:
            self.add(tileset, frame.tile_id)

    def tiles(self) -> List[TileRef]:
        """Members ordered by tileset firstgid, then tile id."""
        return sorted(self._tiles, key=lambda ref: (ref[0].firstgid, ref[1]))

    def filenames(self) -> List[str]:
        return [tile_filename(tileset.name, tile) for tileset, tile in self.tiles()]

    def __contains__(self, ref) -> bool:
        return ref in self._tiles

    def __len__(self) -> int:
        return len(self._tiles)
