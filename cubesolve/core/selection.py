"""
Face/click-count layer selection, kept as an explicit value owned by the caller.

Pressing the key of the selected face again steps one layer deeper (wrapping after N);
pressing another face starts over at its outer layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cubesolve.core.moves import Direction, Face, GENERATOR_FACES, Move


@dataclass(frozen=True)
class Selection:
    face: Optional[Face] = None
    click_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.face is None

    def select(self, face: Face | str, size: int) -> "Selection":
        face = Face(face)
        if face == self.face:
            return Selection(face, self.click_count % size + 1)
        return Selection(face, 1)

    def clear(self) -> "Selection":
        return Selection()

    def layer_index(self, size: int) -> int:
        """
        Lattice index along the face's axis for the current click count.

        F/R/T count from the high end of the axis, B/L/D from the low end.
        """
        if self.face is None:
            raise ValueError("No face is selected")
        if not 1 <= self.click_count <= size:
            raise ValueError(f"click_count must be in [1, {size}], got {self.click_count}")
        if self.face in GENERATOR_FACES:
            return size - self.click_count
        return self.click_count - 1

    def move(self, size: int, direction: Direction = Direction.CLOCKWISE) -> Move:
        return Move(self.face, self.layer_index(size), Direction(direction))

    @classmethod
    def for_move(cls, move: Move, size: int) -> "Selection":
        """Selection that reproduces `move`'s layer, used when replaying solver output."""
        if move.face in GENERATOR_FACES:
            return cls(move.face, size - move.layer)
        return cls(move.face, move.layer + 1)
