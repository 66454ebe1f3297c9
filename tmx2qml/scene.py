"""
QtQuick scene generation.

=============================================================================
DOCUMENT LAYOUT
=============================================================================

    import QtQuick 2.0

    Flickable {
        id: root
        contentWidth: 320
        contentHeight: 240
        boundsBehavior: Flickable.StopAtBounds
        property alias ground: ground          <- one per layer
        Item {                                 <- one per layer
            id: ground
            width: 320
            height: 240
            Image{x:0;y:0;source:"base_3.png"}     <- static tile
            Image{x:16;y:0;source:base_5_6}        <- animated tile
        }
        property string base_5_6: ""           <- one per distinct animation
        SequentialAnimation{
            running:true
            loops: Animation.Infinite
            ScriptAction{script:base_5_6="base_5.png"}
            PauseAnimation{duration:100}
            ...
        }
    }

=============================================================================
ANIMATED TILES
=============================================================================

An animated Image binds its source to a string property instead of a
literal filename. The SequentialAnimation rewrites that property frame by
frame, so every Image bound to it changes together.

Animation blocks are written after ALL layers, from the registry, so each
distinct sequence appears once no matter how many cells use it.

=============================================================================
"""

import logging
import math
from typing import List

from tmx_manager import TiledMap, TileLayer
from .animations import AnimationRegistry
from .assets import AssetCollector
from .identifiers import layer_id, tile_filename

logger = logging.getLogger(__name__)

INDENT = "\t"

# Offsets and opacity read from XML carry float noise
EPSILON = 1e-6


def format_number(value: float) -> str:
    """Shortest general form: 16 -> "16", 2.5 -> "2.5"."""
    return f"{value:g}"


class SceneBuilder:
    """
    Builds the lines of a QML scene for one map.

    render_layer() registers static tiles with the asset collector and
    animated tiles with the animation registry as a side effect, so layers
    must be rendered before render_animations() is called.
    """

    def __init__(self, tmx_map: TiledMap, animations: AnimationRegistry,
                 assets: AssetCollector):
        self.tmx_map = tmx_map
        self.animations = animations
        self.assets = assets

    def render(self) -> List[str]:
        """Full document body (everything below the generated-file header)."""
        tmx_map = self.tmx_map
        layers = tmx_map.tile_layers()

        lines = [
            "import QtQuick 2.0",
            "",
            "Flickable {",
            f"{INDENT}id: root",
            f"{INDENT}contentWidth: {tmx_map.width * tmx_map.tilewidth}",
            f"{INDENT}contentHeight: {tmx_map.height * tmx_map.tileheight}",
            f"{INDENT}boundsBehavior: Flickable.StopAtBounds",
        ]
        for layer in layers:
            name = layer_id(layer.name)
            lines.append(f"{INDENT}property alias {name}: {name}")

        for layer in layers:
            lines.extend(self.render_layer(layer))

        lines.extend(self.render_animations())
        lines.append("}")
        return lines

    def render_layer(self, layer: TileLayer) -> List[str]:
        """One Item block with an Image per non-empty cell, row by row."""
        tmx_map = self.tmx_map
        inner = INDENT * 2

        lines = [
            f"{INDENT}Item {{",
            f"{inner}id: {layer_id(layer.name)}",
            f"{inner}width: {layer.width * tmx_map.tilewidth}",
            f"{inner}height: {layer.height * tmx_map.tileheight}",
        ]
        if not math.isclose(layer.offsetx, 0.0, abs_tol=EPSILON):
            lines.append(f"{inner}x: {format_number(layer.offsetx)}")
        if not math.isclose(layer.offsety, 0.0, abs_tol=EPSILON):
            lines.append(f"{inner}y: {format_number(layer.offsety)}")
        if not math.isclose(layer.opacity, 1.0, abs_tol=EPSILON):
            lines.append(f"{inner}opacity: {format_number(layer.opacity)}")
        if not layer.visible:
            lines.append(f"{inner}visible: false")

        placed = 0
        for y in range(layer.height):
            for x in range(layer.width):
                source = self._cell_source(layer.get_tile_gid(x, y))
                if source is None:
                    continue
                lines.append(f"{inner}Image{{x:{x * tmx_map.tilewidth};"
                             f"y:{y * tmx_map.tileheight};source:{source}}}")
                placed += 1

        lines.append(f"{INDENT}}}")
        logger.debug(f"Layer '{layer.name}': {placed} tiles placed")
        return lines

    def _cell_source(self, gid: int):
        """
        QML value for an Image source, or None when nothing is drawn.

        Static tiles get a quoted filename, animated tiles the name of the
        property their animation updates.
        """
        ref = self.tmx_map.resolve_gid(gid)
        if ref is None:
            return None
        tileset, local_id = ref

        tile = tileset.tile_at(local_id)
        if tile is None:
            logger.debug(f"GID {gid} has no tile in tileset '{tileset.name}'")
            return None

        if tile.is_animated:
            return self.animations.canonicalize(tileset, tile.animation)

        self.assets.add(tileset, tile.id)
        return f'"{tile_filename(tileset.name, tile.id)}"'

    def render_animations(self) -> List[str]:
        """A string property and a looping SequentialAnimation per sequence."""
        inner = INDENT * 2
        lines: List[str] = []

        for tileset, sequences in self.animations.items():
            for name, frames in sequences:
                lines.append(f'{INDENT}property string {name}: ""')
                lines.append(f"{INDENT}SequentialAnimation{{")
                lines.append(f"{inner}running:true")
                lines.append(f"{inner}loops: Animation.Infinite")
                for frame in frames:
                    filename = tile_filename(tileset.name, frame.tile_id)
                    lines.append(f'{inner}ScriptAction{{script:{name}="{filename}"}}')
                    lines.append(f"{inner}PauseAnimation{{duration:{frame.duration}}}")
                lines.append(f"{INDENT}}}")

        return lines
