"""
Map export: TMX model in, QML scene + Qt resource manifest + tile list out.

=============================================================================
PIPELINE
=============================================================================

    TiledMap --[SceneBuilder]--> scene lines
                   |   |
                   |   +--> AnimationRegistry (distinct frame sequences)
                   +------> AssetCollector    (tiles to rasterize)

    AssetCollector + scene filename --> manifest lines

export() never touches the filesystem. write_export() puts the scene, the
manifest and one PNG per collected tile into a directory.

=============================================================================
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from tmx_manager import TiledMap
from . import APPLICATION_NAME, PROJECT_URL
from .animations import AnimationRegistry
from .assets import AssetCollector, TileRef
from .errors import MapParseError, OutputWriteError
from .identifiers import manifest_filename, map_prefix, scene_filename, tile_filename
from .manifest import manifest_entries, render_manifest
from .rasterizer import TileRasterizer
from .scene import SceneBuilder

logger = logging.getLogger(__name__)


def format_timestamp(moment: datetime) -> str:
    """Qt text date form, e.g. "Mon Oct 19 09:05:03 2026"."""
    return f"{moment:%a %b} {moment.day} {moment:%H:%M:%S %Y}"


def generate_header(generated_at: datetime,
                    application_name: str = APPLICATION_NAME) -> List[str]:
    """Generated-file warning banner, ending with a blank line."""
    return [
        "/*******************************************************************************",
        " * *** WARNING : DO NOT EDIT!!!",
        f" * This file was generated by \"{application_name}\" on "
        f"{format_timestamp(generated_at)} UTC",
        " *",
        f" * For more information about {application_name}, please visit",
        f" *     {PROJECT_URL}",
        " *",
        " * For more information about Tiled Map Editor, please visit",
        " *     http://www.mapeditor.org/",
        " * Don't forget to show your support the creator of Tiled Map Editor: ",
        " *     https://www.patreon.com/bjorn",
        " ******************************************************************************/",
        "",
    ]


@dataclass
class ExportResult:
    scene_filename: str
    manifest_filename: str
    scene_lines: List[str] = field(default_factory=list)
    manifest_lines: List[str] = field(default_factory=list)
    assets: List[TileRef] = field(default_factory=list)   # tiles to rasterize

    @property
    def asset_filenames(self) -> List[str]:
        return [tile_filename(tileset.name, tile) for tileset, tile in self.assets]


class MapExporter:
    """
    Converts one TiledMap into scene and manifest lines.

    The map is only read. Every export() call starts from empty
    registries, so exporting an unchanged map twice with the same
    timestamp gives identical results.
    """

    def __init__(self, tmx_map: TiledMap, prefix: str,
                 generated_at: Optional[datetime] = None):
        self.tmx_map = tmx_map
        self.prefix = prefix
        self.generated_at = generated_at or datetime.now(timezone.utc)

    def export(self) -> ExportResult:
        animations = AnimationRegistry()
        assets = AssetCollector()

        builder = SceneBuilder(self.tmx_map, animations, assets)
        body = builder.render()

        # Every frame of every distinct sequence ships, whichever cell found it
        for tileset, sequences in animations.items():
            for _, frames in sequences:
                assets.add_animation(tileset, frames)

        header = generate_header(self.generated_at)
        result = ExportResult(
            scene_filename=scene_filename(self.prefix),
            manifest_filename=manifest_filename(self.prefix),
            scene_lines=header + body,
            assets=assets.tiles(),
        )
        entries = manifest_entries(result.scene_filename, assets.filenames())
        result.manifest_lines = render_manifest(entries, header)

        logger.info(f"Exported {len(self.tmx_map.tile_layers())} layers, "
                    f"{len(animations)} animations, {len(assets)} tile images")
        return result


def load_map(map_path: Union[str, Path]) -> TiledMap:
    """
    Read a TMX file.

    Raises:
    -------
    MapParseError : If the file is missing, unreadable or malformed, or
                    uses a layer compression that cannot be decoded here
    """
    try:
        return TiledMap.load(map_path)
    except ET.ParseError as e:
        raise MapParseError(map_path, f"malformed XML: {e}") from e
    except (OSError, ValueError, ImportError) as e:
        raise MapParseError(map_path, str(e)) from e


def write_lines(path: Path, lines: List[str]):
    try:
        # Text mode: "\n" becomes the platform newline
        with open(path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
    except OSError as e:
        raise OutputWriteError(path, str(e)) from e


def write_export(result: ExportResult, tmx_map: TiledMap,
                 map_path: Union[str, Path],
                 output_dir: Union[str, Path] = ".") -> None:
    """Write scene, manifest and tile images into output_dir."""
    output_dir = Path(output_dir)

    write_lines(output_dir / result.scene_filename, result.scene_lines)
    logger.info(f"Wrote {output_dir / result.scene_filename}")

    rasterizer = TileRasterizer(tmx_map, map_path)
    for (tileset, tile), filename in zip(result.assets, result.asset_filenames):
        rasterizer.save(tileset, tile, output_dir / filename)
        logger.debug(f"Wrote {output_dir / filename}")

    write_lines(output_dir / result.manifest_filename, result.manifest_lines)
    logger.info(f"Wrote {output_dir / result.manifest_filename}")


def export_file(map_path: Union[str, Path],
                output_dir: Union[str, Path] = ".",
                generated_at: Optional[datetime] = None) -> ExportResult:
    """Load a TMX file and write its export into output_dir."""
    logger.info(f"Loading TMX: {map_path}")
    tmx_map = load_map(map_path)

    result = MapExporter(tmx_map, map_prefix(map_path), generated_at).export()
    write_export(result, tmx_map, map_path, output_dir)
    return result
