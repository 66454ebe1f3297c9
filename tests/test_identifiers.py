"""Tests for identifier generation."""

from tmx_manager import Frame
from tmx2qml import identifiers


class TestNames:
    """Layer, tile and animation identifiers."""

    def test_layer_id(self) -> None:
        assert identifiers.layer_id("Ground Layer") == "ground_layer"
        assert identifiers.layer_id("A  B") == "a__b"

    def test_tile_id_and_filename(self) -> None:
        assert identifiers.tile_id("Dungeon Walls", 12) == "dungeon_walls_12"
        assert identifiers.tile_filename("Base", 3) == "base_3.png"

    def test_animation_id_lists_every_frame_in_order(self) -> None:
        frames = [Frame(4, 100), Frame(5, 200), Frame(6, 100)]
        assert identifiers.animation_id("Water", frames) == "water_4_5_6"
        assert identifiers.animation_id("Water", reversed(frames)) == "water_6_5_4"


class TestMapPrefix:
    """Output names derived from the map path."""

    def test_capitalizes_only_first_character(self) -> None:
        assert identifiers.map_prefix("maps/ground.tmx") == "Ground"
        assert identifiers.map_prefix("my level.tmx") == "My level"
        assert identifiers.map_prefix("castleKeep.tmx") == "CastleKeep"

    def test_stops_at_first_dot(self) -> None:
        assert identifiers.map_prefix("/tmp/level.v2.tmx") == "Level"

    def test_output_filenames(self) -> None:
        assert identifiers.scene_filename("Ground") == "GroundMap.qml"
        assert identifiers.manifest_filename("Ground") == "GroundMap.qrc"
