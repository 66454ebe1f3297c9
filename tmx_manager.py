#!/usr/bin/env python3

"""
Module for reading TMX files (Tiled Map Format) into an in-memory model
Supports TMX version 1.11.0 and earlier versions

=============================================================================
WHAT IS READ?
=============================================================================

The exporter only needs the parts of a TMX document that describe what is
drawn on a tile grid:

- Map dimensions and tile sizes
- Tilesets (embedded or external TSX), including per-tile animations
- Tile layers (nested inside group layers or not)

Object layers and image layers are skipped. Flip/rotation flags stored in
the high bits of each GID are masked off.

=============================================================================
GLOBAL TILE IDs (GIDs)
=============================================================================

Tiles are referenced by Global IDs (GIDs) across all tilesets:

    Tileset A (firstgid=1):   tiles 1-100
    Tileset B (firstgid=101): tiles 101-200

    GID 0 = empty tile (no graphic)
    GID 50 = tile 49 from tileset A
    GID 150 = tile 49 from tileset B

Local tile ID within tileset = GID - tileset.firstgid

=============================================================================
TILE ANIMATIONS
=============================================================================

A tile can carry an animation, a list of frames that each name another
tile of the SAME tileset and a duration in milliseconds:

    <tile id="4">
        <animation>
            <frame tileid="4" duration="100"/>
            <frame tileid="5" duration="100"/>
        </animation>
    </tile>

=============================================================================
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional, List, Dict, Tuple, Union
from dataclasses import dataclass, field
from pathlib import Path
import base64
import zlib
import array

logger = logging.getLogger(__name__)

# Tiled keeps flip flags in the upper 3 bits of a raw GID
GID_MASK = 0x1FFFFFFF


# =============================================================================
# IMAGE CLASS
# =============================================================================

@dataclass
class Image:
    """
    Image reference used in tilesets.

    Used by both spritesheet tilesets (one image, many tiles) and
    image collection tilesets (one image per tile).

    source: Path to image file (relative to the TMX/TSX file)
    trans:  Transparent color in hex (e.g., "ff00ff" for magenta)
    """
    source: str                          # Path to image file
    trans: Optional[str] = None          # Transparent color (#RRGGBB)

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'Image':
        """Parse image from XML element."""
        return cls(
            source=elem.get('source', ''),
            trans=elem.get('trans')
        )


# =============================================================================
# FRAME CLASS
# =============================================================================

@dataclass(frozen=True)
class Frame:
    """
    One step of a tile animation.

    Frames are compared by value, so two animations are equal exactly when
    they show the same tiles for the same durations in the same order.
    """
    tile_id: int                         # Local tile ID (same tileset)
    duration: int                        # Milliseconds

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'Frame':
        return cls(tile_id=int(elem.get('tileid', 0)),
                   duration=int(elem.get('duration', 0)))


# =============================================================================
# TILE CLASS
# =============================================================================

@dataclass
class Tile:
    """
    Individual tile within a tileset.

    The 'id' is LOCAL to the tileset (0-based index). Only tiles with an
    animation or (for image collections) their own image are listed in
    the TMX; the rest are implied by the tileset's tilecount.
    """
    id: int                                          # Local tile ID (within tileset)
    image: Optional[Image] = None                    # Image (for collection tilesets)
    animation: List[Frame] = field(default_factory=list)

    @property
    def is_animated(self) -> bool:
        return bool(self.animation)

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'Tile':
        """Parse tile from XML element."""
        tile = cls(id=int(elem.get('id', 0)))

        img_elem = elem.find('image')
        if img_elem is not None:
            tile.image = Image.from_xml(img_elem)

        anim_elem = elem.find('animation')
        if anim_elem is not None:
            tile.animation = [Frame.from_xml(frame_elem)
                              for frame_elem in anim_elem.findall('frame')]

        return tile


# =============================================================================
# TILESET CLASS
# =============================================================================

@dataclass(eq=False)
class Tileset:
    """
    Tileset collection - a set of tile graphics.

    ==========================================================================
    TILESET TYPES
    ==========================================================================

    1. SPRITESHEET TILESET (most common):
       One large image divided into a grid of tiles.

       +---+---+---+---+
       | 0 | 1 | 2 | 3 |
       +---+---+---+---+
       | 4 | 5 | 6 | 7 |
       +---+---+---+---+

       Attributes used: image, tilewidth, tileheight, columns, spacing, margin

    2. IMAGE COLLECTION TILESET:
       Each tile is a separate image file referenced by its Tile.

    ==========================================================================
    IDENTITY
    ==========================================================================

    Tilesets compare and hash by identity: two tilesets sharing a name are
    still different tilesets within a map.

    ==========================================================================
    """
    firstgid: int                                    # First Global ID
    name: str                                        # Tileset name
    tilewidth: int                                   # Tile width in pixels
    tileheight: int                                  # Tile height in pixels
    tilecount: int = 0                               # Total number of tiles
    columns: int = 0                                 # Tiles per row (for spritesheet)
    spacing: int = 0                                 # Pixels between tiles
    margin: int = 0                                  # Pixels around edge
    image: Optional[Image] = None                    # Spritesheet image
    tiles: Dict[int, Tile] = field(default_factory=dict)  # Tile metadata
    source: Optional[str] = None                     # TSX file path (if external)

    @classmethod
    def from_xml(cls, elem: ET.Element, firstgid: int) -> 'Tileset':
        """
        Parse tileset from XML element.

        Parameters:
        -----------
        elem : ET.Element
            The <tileset> XML element
        firstgid : int
            First Global ID (from parent TMX, not the TSX itself)
        """
        tileset = cls(
            firstgid=firstgid,
            name=elem.get('name', ''),
            tilewidth=int(elem.get('tilewidth', 0)),
            tileheight=int(elem.get('tileheight', 0)),
            tilecount=int(elem.get('tilecount', 0)),
            columns=int(elem.get('columns', 0)),
            spacing=int(elem.get('spacing', 0)),
            margin=int(elem.get('margin', 0)),
            source=elem.get('source')
        )

        img_elem = elem.find('image')
        if img_elem is not None:
            tileset.image = Image.from_xml(img_elem)

        for tile_elem in elem.findall('tile'):
            tile = Tile.from_xml(tile_elem)
            tileset.tiles[tile.id] = tile

        return tileset

    def tile_at(self, tile_id: int) -> Optional[Tile]:
        """
        Get the tile with the given local ID.

        Tiles without metadata are created on demand when the ID lies
        within the tileset's tilecount. Returns None for IDs that do not
        exist in this tileset.
        """
        tile = self.tiles.get(tile_id)
        if tile is None and 0 <= tile_id < self.tilecount:
            tile = Tile(id=tile_id)
        return tile


# =============================================================================
# LAYER DATA CLASS
# =============================================================================

@dataclass
class LayerData:
    """
    Tile layer data storage.

    ==========================================================================
    DATA ENCODINGS
    ==========================================================================

    1. XML (deprecated):  <tile gid="1"/><tile gid="2"/>...
    2. CSV:               1,2,3,4,5,...
    3. Base64:            optionally compressed with zlib, gzip or zstd

    Internally, tiles are stored as array.array('I') - unsigned 32-bit ints.
    Index calculation: tiles[y * width + x]

    ==========================================================================
    """
    tiles: array.array = field(default_factory=lambda: array.array('I'))

    def decode_data(self, data_elem: ET.Element, width: int, height: int):
        """
        Decode tile data from a <data> XML element.

        Raises ValueError when the data cannot be decoded or does not
        hold width x height tiles.
        """
        encoding = data_elem.get('encoding')
        compression = data_elem.get('compression')

        if encoding == 'csv':
            csv_data = (data_elem.text or '').strip()
            # Trailing commas create empty elements
            gids = [int(x) for x in csv_data.replace('\n', '').split(',')
                    if x.strip()]
            self.tiles = array.array('I', gids)

        elif encoding == 'base64':
            raw_data = base64.b64decode((data_elem.text or '').strip())
            try:
                raw_data = _decompress(raw_data, compression)
            except (zlib.error, OSError, EOFError) as e:
                raise ValueError(f"Cannot decompress {compression} layer data: {e}") from e

            # Each tile is 4 bytes (little-endian uint32)
            self.tiles = array.array('I')
            self.tiles.frombytes(raw_data)

        else:
            gids = [int(tile_elem.get('gid', 0))
                    for tile_elem in data_elem.findall('tile')]
            self.tiles = array.array('I', gids)

        if len(self.tiles) != width * height:
            raise ValueError(
                f"Layer data has {len(self.tiles)} tiles, "
                f"expected {width}x{height}"
            )


def _decompress(raw_data: bytes, compression: Optional[str]) -> bytes:
    if compression == 'zlib':
        return zlib.decompress(raw_data)

    if compression == 'gzip':
        import gzip
        return gzip.decompress(raw_data)

    if compression == 'zstd':
        # zstd requires external library (not in stdlib)
        try:
            import zstandard as zstd
        except ImportError:
            raise ImportError(
                "zstandard library required for zstd compression. "
                "Install with: pip install zstandard"
            )
        try:
            return zstd.ZstdDecompressor().decompress(raw_data)
        except zstd.ZstdError as e:
            raise ValueError(f"Cannot decompress zstd layer data: {e}") from e

    return raw_data


# =============================================================================
# TILE LAYER CLASS
# =============================================================================

@dataclass
class TileLayer:
    """
    Tile layer - a grid of tile references.

    Rendering properties:
    - visible: Whether layer is rendered
    - opacity: Transparency (0.0 = invisible, 1.0 = opaque)
    - offsetx, offsety: Pixel offset from map origin

    GID 0 = empty (no tile)
    GID > 0 = reference to tileset tile (flip bits included)
    """
    name: str                                        # Layer name
    width: int                                       # Width in tiles
    height: int                                      # Height in tiles
    id: int = 0                                      # Unique layer ID
    visible: bool = True                             # Is layer rendered?
    opacity: float = 1.0                             # Transparency
    offsetx: float = 0                               # X pixel offset
    offsety: float = 0                               # Y pixel offset
    data: LayerData = field(default_factory=LayerData)

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'TileLayer':
        """Parse tile layer from XML element."""
        layer = cls(
            name=elem.get('name', ''),
            width=int(elem.get('width', 0)),
            height=int(elem.get('height', 0)),
            id=int(elem.get('id', 0)),
            # '1' is default for visible (absent means visible)
            visible=elem.get('visible', '1') == '1',
            opacity=float(elem.get('opacity', 1.0)),
            offsetx=float(elem.get('offsetx', 0)),
            offsety=float(elem.get('offsety', 0)),
        )

        data_elem = elem.find('data')
        if data_elem is not None:
            layer.data = LayerData()
            layer.data.decode_data(data_elem, layer.width, layer.height)
        else:
            layer.data.tiles = array.array('I', [0] * (layer.width * layer.height))

        return layer

    def get_tile_gid(self, x: int, y: int) -> int:
        """
        Get the GID of the tile at column x, row y with flip flags removed.

        Out of bounds positions read as empty (0).
        """
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.data.tiles[y * self.width + x] & GID_MASK
        return 0

    def set_tile_gid(self, x: int, y: int, gid: int):
        """Set the GID of the tile at position (x, y). 0 clears the tile."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.data.tiles[y * self.width + x] = gid


# =============================================================================
# LAYER GROUP CLASS
# =============================================================================

@dataclass
class LayerGroup:
    """Group layer - a folder of other layers. Only tile layers are kept."""
    name: str = ""
    layers: List[Union[TileLayer, 'LayerGroup']] = field(default_factory=list)

    @classmethod
    def from_xml(cls, elem: ET.Element) -> 'LayerGroup':
        group = cls(name=elem.get('name', ''))
        group.layers = _parse_layers(elem)
        return group


def _parse_layers(parent: ET.Element) -> List[Union[TileLayer, LayerGroup]]:
    layers: List[Union[TileLayer, LayerGroup]] = []
    for elem in parent:
        if elem.tag == 'layer':
            layers.append(TileLayer.from_xml(elem))
        elif elem.tag == 'group':
            layers.append(LayerGroup.from_xml(elem))
        elif elem.tag in ('objectgroup', 'imagelayer'):
            logger.debug(f"Skipping {elem.tag} '{elem.get('name', '')}'")
    return layers


# =============================================================================
# TILED MAP CLASS
# =============================================================================

@dataclass
class TiledMap:
    """
    Complete Tiled map - the root object for TMX files.

    ==========================================================================
    USAGE
    ==========================================================================

    Loading:
        map_data = TiledMap.load("level1.tmx")
        print(f"Map size: {map_data.width}x{map_data.height}")

    Walking cells:
        for layer in map_data.tile_layers():
            gid = layer.get_tile_gid(5, 10)
            ref = map_data.resolve_gid(gid)    # (tileset, local id) or None

    ==========================================================================
    """
    width: int = 0                                   # Map width in tiles
    height: int = 0                                  # Map height in tiles
    tilewidth: int = 0                               # Tile width in pixels
    tileheight: int = 0                              # Tile height in pixels
    tilesets: List[Tileset] = field(default_factory=list)
    layers: List[Union[TileLayer, LayerGroup]] = field(default_factory=list)

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'TiledMap':
        """
        Load a TMX file from disk.

        Raises:
        -------
        FileNotFoundError : If TMX file doesn't exist
        xml.etree.ElementTree.ParseError : If XML is malformed
        ValueError : If a numeric attribute or layer data is invalid
        """
        filepath = Path(filepath)

        root = ET.parse(filepath).getroot()
        if root.tag != 'map':
            raise ValueError(f"Not a TMX map: root element is <{root.tag}>")

        map_obj = cls(
            width=int(root.get('width', 0)),
            height=int(root.get('height', 0)),
            tilewidth=int(root.get('tilewidth', 0)),
            tileheight=int(root.get('tileheight', 0)),
        )

        for tileset_elem in root.findall('tileset'):
            firstgid = int(tileset_elem.get('firstgid', 1))

            if tileset_elem.get('source'):
                # External tileset: actual data is in the TSX file
                tsx_path = filepath.parent / tileset_elem.get('source')

                try:
                    tsx_root = ET.parse(tsx_path).getroot()
                    tileset = Tileset.from_xml(tsx_root, firstgid)
                    tileset.source = tileset_elem.get('source')

                except FileNotFoundError:
                    logger.warning(f"External tileset not found: {tsx_path}")
                    tileset = Tileset(
                        firstgid=firstgid,
                        name=Path(tileset_elem.get('source')).stem,
                        tilewidth=map_obj.tilewidth,
                        tileheight=map_obj.tileheight,
                        source=tileset_elem.get('source')
                    )
            else:
                tileset = Tileset.from_xml(tileset_elem, firstgid)

            map_obj.tilesets.append(tileset)

        # Lookup walks tilesets by ascending firstgid
        map_obj.tilesets.sort(key=lambda ts: ts.firstgid)

        map_obj.layers = _parse_layers(root)

        return map_obj

    def get_tileset_for_gid(self, gid: int) -> Optional[Tileset]:
        """
        Find which tileset contains a given GID.

        A GID belongs to the tileset with the largest firstgid <= gid.
        We iterate backwards (largest firstgid first).
        """
        gid &= GID_MASK
        if gid == 0:
            return None
        for i in range(len(self.tilesets) - 1, -1, -1):
            if gid >= self.tilesets[i].firstgid:
                return self.tilesets[i]
        return None

    def resolve_gid(self, gid: int) -> Optional[Tuple[Tileset, int]]:
        """
        Resolve a GID to (tileset, local tile id).

        Returns None for empty cells and for GIDs below every tileset.
        The local id may still name a tile the tileset does not have;
        use Tileset.tile_at() to check.
        """
        tileset = self.get_tileset_for_gid(gid)
        if tileset is None:
            return None
        return tileset, (gid & GID_MASK) - tileset.firstgid

    def tile_layers(self) -> List[TileLayer]:
        """All tile layers in document order, expanding groups recursively."""
        result: List[TileLayer] = []

        def flatten(layers):
            for layer in layers:
                if isinstance(layer, LayerGroup):
                    flatten(layer.layers)
                else:
                    result.append(layer)

        flatten(self.layers)
        return result


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def create_empty_map(width: int, height: int, tilewidth: int, tileheight: int) -> TiledMap:
    """Create an empty map ready for adding tilesets and layers."""
    return TiledMap(
        width=width,
        height=height,
        tilewidth=tilewidth,
        tileheight=tileheight
    )


def create_layer(name: str, width: int, height: int) -> TileLayer:
    """Create an empty tile layer filled with GID 0 (empty tiles)."""
    layer = TileLayer(name=name, width=width, height=height)
    layer.data.tiles = array.array('I', [0] * (width * height))
    return layer
