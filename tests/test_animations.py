"""Tests for animation deduplication and asset collection."""

from tmx_manager import Frame
from tmx2qml.animations import AnimationRegistry
from tmx2qml.assets import AssetCollector


def frames(*pairs):
    return [Frame(tile_id=t, duration=d) for t, d in pairs]


class TestAnimationRegistry:
    """canonicalize() dedup behaviour."""

    def test_equal_sequences_share_identifier(self, make_tileset) -> None:
        tileset = make_tileset("Water")
        registry = AnimationRegistry()

        first = registry.canonicalize(tileset, frames((4, 100), (5, 100)))
        second = registry.canonicalize(tileset, frames((4, 100), (5, 100)))

        assert first == second == "water_4_5"
        assert len(registry) == 1

    def test_distinct_durations_are_distinct_sequences(self, make_tileset) -> None:
        tileset = make_tileset("Water")
        registry = AnimationRegistry()

        steady = registry.canonicalize(tileset, frames((4, 100), (5, 100)))
        uneven = registry.canonicalize(tileset, frames((4, 100), (5, 250)))

        assert len(registry) == 2
        assert steady == "water_4_5"
        assert uneven == "water_4_5_d100_250"

    def test_identifiers_stay_bound_to_their_sequence(self, make_tileset) -> None:
        tileset = make_tileset("Water")
        registry = AnimationRegistry()

        registry.canonicalize(tileset, frames((4, 100), (5, 100)))
        registry.canonicalize(tileset, frames((4, 300), (5, 300)))

        assert registry.canonicalize(tileset, frames((4, 300), (5, 300))) == "water_4_5_d300_300"
        assert registry.canonicalize(tileset, frames((4, 100), (5, 100))) == "water_4_5"
        [(_, sequences)] = list(registry.items())
        assert [name for name, _ in sequences] == ["water_4_5", "water_4_5_d300_300"]

    def test_order_matters(self, make_tileset) -> None:
        tileset = make_tileset("Fire")
        registry = AnimationRegistry()

        aba = registry.canonicalize(tileset, frames((1, 50), (2, 50), (1, 50)))
        baa = registry.canonicalize(tileset, frames((2, 50), (1, 50), (1, 50)))

        assert aba != baa
        [(_, sequences)] = list(registry.items())
        assert [tuple(f.tile_id for f in seq) for _, seq in sequences] == [(1, 2, 1), (2, 1, 1)]

    def test_tilesets_are_kept_apart_in_registration_order(self, make_tileset) -> None:
        water = make_tileset("Water", firstgid=1)
        lava = make_tileset("Lava", firstgid=17)
        registry = AnimationRegistry()

        registry.canonicalize(lava, frames((0, 100), (1, 100)))
        registry.canonicalize(water, frames((0, 100), (1, 100)))
        registry.canonicalize(lava, frames((0, 100), (1, 100)))

        assert [tileset.name for tileset, _ in registry.items()] == ["Lava", "Water"]
        assert len(registry) == 2

    def test_same_name_tilesets_are_different_keys(self, make_tileset) -> None:
        a = make_tileset("Tiles", firstgid=1)
        b = make_tileset("Tiles", firstgid=17)
        registry = AnimationRegistry()

        registry.canonicalize(a, frames((0, 100)))
        registry.canonicalize(b, frames((0, 100)))

        assert len(list(registry.items())) == 2


class TestAssetCollector:
    """Referential uniqueness of collected tiles."""

    def test_duplicates_collapse(self, make_tileset) -> None:
        tileset = make_tileset("Base")
        assets = AssetCollector()

        assets.add(tileset, 3)
        assets.add(tileset, 3)
        assets.add_animation(tileset, frames((3, 100), (4, 100)))

        assert len(assets) == 2
        assert (tileset, 4) in assets
        assert assets.filenames() == ["base_3.png", "base_4.png"]

    def test_tiles_ordered_by_tileset_then_id(self, make_tileset) -> None:
        first = make_tileset("Zeta", firstgid=1)
        second = make_tileset("Alpha", firstgid=17)
        assets = AssetCollector()

        assets.add(second, 0)
        assets.add(first, 9)
        assets.add(first, 2)

        assert [(ts.name, t) for ts, t in assets.tiles()] == [("Zeta", 2), ("Zeta", 9), ("Alpha", 0)]
