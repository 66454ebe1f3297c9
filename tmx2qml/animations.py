"""
Animation deduplication.

Many cells usually show the same animated tile (water, torches...), and
different tiles of a tileset can even share an identical frame sequence.
Each distinct sequence gets exactly one animation block in the scene, so
the registry remembers, per tileset, every distinct sequence in the order
it was first seen, together with the identifier it was given.

=============================================================================
EQUALITY
=============================================================================

Sequences are compared by value: same length and the same (tile_id,
duration) at every position. Order matters, a->b->a is not b->a->a.
Frames are frozen dataclasses, so a tuple of frames compares structurally.

=============================================================================
IDENTIFIERS
=============================================================================

The identifier is built from the tileset name and the frame tile ids
(water_4_5). Two sequences that show the same tiles with different
durations would get the same name, so the later one is told apart by its
durations: water_4_5_d100_250. Identifiers are fixed when a sequence is
first seen, so they only depend on traversal order.

=============================================================================
"""

import logging
from typing import Dict, Iterator, List, Sequence, Tuple

from tmx_manager import Frame, Tileset
from .identifiers import animation_id

logger = logging.getLogger(__name__)

FrameSequence = Tuple[Frame, ...]


def timed_animation_id(tileset_name: str, frames: Sequence[Frame]) -> str:
    """Identifier of a sequence whose tiles are already used with other durations."""
    durations = "_".join(str(frame.duration) for frame in frames)
    return f"{animation_id(tileset_name, frames)}_d{durations}"


class AnimationRegistry:
    """Distinct frame sequences per tileset, in first-seen order."""

    def __init__(self):
        # Insertion order of both dicts gives registration order
        self._sequences: Dict[Tileset, Dict[FrameSequence, str]] = {}

    def canonicalize(self, tileset: Tileset, frames: Sequence[Frame]) -> str:
        """
        Record a frame sequence and return its canonical identifier.

        Equal sequences within a tileset always map to the first one seen.
        Different sequences of a tileset never share an identifier.
        """
        sequence = tuple(frames)
        known = self._sequences.setdefault(tileset, {})
        name = known.get(sequence)
        if name is None:
            name = animation_id(tileset.name, sequence)
            if name in known.values():
                name = timed_animation_id(tileset.name, sequence)
            known[sequence] = name
            logger.debug(f"New animation {name} ({len(sequence)} frames)")
        return name

    def items(self) -> Iterator[Tuple[Tileset, List[Tuple[str, FrameSequence]]]]:
        """Tilesets in registration order, each with its (identifier, sequence) pairs."""
        for tileset, sequences in self._sequences.items():
            yield tileset, [(name, sequence) for sequence, name in sequences.items()]

    def __len__(self) -> int:
        return sum(len(sequences) for sequences in self._sequences.values())
