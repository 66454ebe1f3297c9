"""Shared fixtures: small maps built in code."""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from tmx_manager import Frame, Tile, Tileset, TileLayer, create_layer


FIXED_TIME = datetime(2026, 10, 5, 9, 5, 3, tzinfo=timezone.utc)


@pytest.fixture
def fixed_time() -> datetime:
    return FIXED_TIME


@pytest.fixture
def make_tileset():
    """Factory: tileset whose animated tiles are given as {tile_id: [(frame_tile, ms), ...]}."""

    def _make(name: str = "Base", firstgid: int = 1, tilecount: int = 16,
              animations: Optional[Dict[int, List[Tuple[int, int]]]] = None) -> Tileset:
        tileset = Tileset(firstgid=firstgid, name=name, tilewidth=16, tileheight=16,
                          tilecount=tilecount, columns=4)
        for tile_id, frames in (animations or {}).items():
            tileset.tiles[tile_id] = Tile(
                id=tile_id,
                animation=[Frame(tile_id=t, duration=d) for t, d in frames],
            )
        return tileset

    return _make


@pytest.fixture
def make_layer():
    """Factory: layer from rows of GIDs."""

    def _make(name: str, rows: List[List[int]]) -> TileLayer:
        layer = create_layer(name, len(rows[0]), len(rows))
        for y, row in enumerate(rows):
            for x, gid in enumerate(row):
                layer.set_tile_gid(x, y, gid)
        return layer

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    """main() installs console handlers; drop them between tests."""
    yield
    for name in ("tmx2qml", "tmx_manager"):
        project_logger = logging.getLogger(name)
        project_logger.handlers.clear()
        project_logger.propagate = True
        project_logger.setLevel(logging.NOTSET)
