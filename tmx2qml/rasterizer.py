"""
Tile image extraction (uses PIL)

=============================================================================
WHERE DO TILE PIXELS COME FROM?
=============================================================================

1. SPRITESHEET TILESET: one image, tiles cut out on a grid.

   tile_x = col * tilewidth + margin + col * spacing
   tile_y = row * tileheight + margin + row * spacing

   with col = tile_id % columns and row = tile_id // columns

2. IMAGE COLLECTION TILESET: each Tile references its own image file.

An <image trans="ff00ff"> colour key turns every pixel of that colour fully
transparent before tiles are cut.

Image paths are relative to the file that DEFINES the tileset: the TMX for
embedded tilesets, the TSX for external ones.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from PIL import Image, ImageChops

from tmx_manager import TiledMap, Tileset
from .errors import OutputWriteError

logger = logging.getLogger(__name__)


class TileRasterizer:
    """
    Writes individual tiles of a map's tilesets as PNG files.

    Spritesheets are opened once and kept for the lifetime of the
    rasterizer.
    """

    def __init__(self, tmx_map: TiledMap, tmx_path: Union[str, Path]):
        self.tmx_map = tmx_map
        # Base path for resolving relative tileset paths
        self.tmx_dir = Path(tmx_path).parent
        self._sheet_cache: Dict[Tileset, Image.Image] = {}

    def tileset_base(self, tileset: Tileset) -> Path:
        if tileset.source:
            return self.tmx_dir / Path(tileset.source).parent
        return self.tmx_dir

    def tile_image(self, tileset: Tileset, tile_id: int) -> Image.Image:
        """
        RGBA image of one tile.

        Raises:
        -------
        OutputWriteError : If the tileset has no image for this tile or the
                           image file cannot be read
        """
        tile = tileset.tiles.get(tile_id)
        if tile is not None and tile.image is not None:
            path = self.tileset_base(tileset) / tile.image.source
            return self._open(path, tile.image.trans)

        if tileset.image is None or tileset.columns <= 0:
            raise OutputWriteError(f"{tileset.name}:{tile_id}",
                                   "tileset has no image for this tile")

        sheet = self._sheet_cache.get(tileset)
        if sheet is None:
            sheet = self._open(self.tileset_base(tileset) / tileset.image.source,
                               tileset.image.trans)
            self._sheet_cache[tileset] = sheet
            logger.debug(f"Loaded tileset: {tileset.name} ({sheet.width}x{sheet.height})")

        tw = tileset.tilewidth
        th = tileset.tileheight
        col = tile_id % tileset.columns
        row = tile_id // tileset.columns
        tile_x = col * tw + tileset.margin + col * tileset.spacing
        tile_y = row * th + tileset.margin + row * tileset.spacing

        return sheet.crop((tile_x, tile_y, tile_x + tw, tile_y + th))

    def save(self, tileset: Tileset, tile_id: int, path: Union[str, Path]):
        image = self.tile_image(tileset, tile_id)
        try:
            image.save(str(path), "PNG")
        except OSError as e:
            raise OutputWriteError(path, str(e)) from e

    @staticmethod
    def _open(path: Path, trans: Optional[str] = None) -> Image.Image:
        try:
            with Image.open(str(path)) as image:
                rgba = image.convert('RGBA')
        except OSError as e:
            raise OutputWriteError(path, f"cannot read tile image: {e}") from e
        if trans:
            try:
                apply_color_key(rgba, trans)
            except ValueError as e:
                raise OutputWriteError(path, f"bad transparent colour {trans!r}") from e
        return rgba


def apply_color_key(image: Image.Image, trans: str) -> Image.Image:
    """Make every pixel of colour trans (hex RRGGBB) fully transparent, in place."""
    hex_color = trans.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError(f"not an RRGGBB colour: {trans}")
    key = tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))

    difference = ImageChops.difference(image.convert('RGB'), Image.new('RGB', image.size, key))
    red, green, blue = difference.split()
    distance = ImageChops.lighter(ImageChops.lighter(red, green), blue)
    # 0 where the pixel matches the key, 255 elsewhere
    keep = distance.point(lambda value: 255 if value else 0)

    image.putalpha(ImageChops.darker(image.getchannel('A'), keep))
    return image
