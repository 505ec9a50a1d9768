"""
Move vocabulary for the lattice cube: faces, rotation axes, turn directions and moves.

A move is pure data. Applying it to a state is the puzzle's job
(see :meth:`cubesolve.puzzles.lattice_cube.LatticeCube.apply_move`).
"""

from __future__ import annotations

import re
from enum import Enum, IntEnum
from typing import NamedTuple


class Face(str, Enum):
    """Cardinal face keys. The declaration order is the sticker order inside a piece."""

    F = "F"
    B = "B"
    L = "L"
    R = "R"
    T = "T"
    D = "D"

    @property
    def sticker_index(self) -> int:
        return FACE_ORDER.index(self)

    @property
    def axis(self) -> "Axis":
        return FACE_AXIS[self]


class Axis(IntEnum):
    X = 0
    Y = 1
    Z = 2


class Direction(str, Enum):
    CLOCKWISE = "cw"
    COUNTER_CLOCKWISE = "ccw"

    @property
    def inverse(self) -> "Direction":
        if self is Direction.CLOCKWISE:
            return Direction.COUNTER_CLOCKWISE
        return Direction.CLOCKWISE

    @property
    def suffix(self) -> str:
        return "" if self is Direction.CLOCKWISE else "'"


FACE_ORDER = tuple(Face)
DIRECTION_ORDER = (Direction.CLOCKWISE, Direction.COUNTER_CLOCKWISE)

# The search only turns these faces; every other layer turn is the same turn seen from
# the opposite side of the cube.
GENERATOR_FACES = (Face.F, Face.R, Face.T)

FACE_AXIS = {
    Face.F: Axis.Z,
    Face.B: Axis.Z,
    Face.L: Axis.X,
    Face.R: Axis.X,
    Face.T: Axis.Y,
    Face.D: Axis.Y,
}

AXIS_GENERATOR = {face.axis: face for face in GENERATOR_FACES}

# new_piece[key] = old_piece[source] for the four stickers orthogonal to the axis.
# The two stickers along the axis keep their colour.
STICKER_CYCLES = {
    (Axis.X, Direction.CLOCKWISE): {Face.T: Face.F, Face.F: Face.D, Face.D: Face.B, Face.B: Face.T},
    (Axis.X, Direction.COUNTER_CLOCKWISE): {
        Face.T: Face.B,
        Face.B: Face.D,
        Face.D: Face.F,
        Face.F: Face.T,
    },
    (Axis.Y, Direction.CLOCKWISE): {Face.F: Face.L, Face.L: Face.B, Face.B: Face.R, Face.R: Face.F},
    (Axis.Y, Direction.COUNTER_CLOCKWISE): {
        Face.F: Face.R,
        Face.R: Face.B,
        Face.B: Face.L,
        Face.L: Face.F,
    },
    (Axis.Z, Direction.CLOCKWISE): {Face.T: Face.R, Face.R: Face.D, Face.D: Face.L, Face.L: Face.T},
    (Axis.Z, Direction.COUNTER_CLOCKWISE): {
        Face.T: Face.L,
        Face.L: Face.D,
        Face.D: Face.R,
        Face.R: Face.T,
    },
}


def sticker_permutation(axis: Axis, direction: Direction) -> tuple[int, ...]:
    """
    Source sticker index for every sticker slot of a piece turned about `axis`.

    `new_piece[i] == old_piece[perm[i]]`.
    """
    cycle = STICKER_CYCLES[(axis, direction)]
    return tuple(cycle.get(face, face).sticker_index for face in FACE_ORDER)


_NOTATION = re.compile(r"^\s*([FBLRTD])(\d+)('?)\s*$")


class Move(NamedTuple):
    """A single layer turn: (face, layer index, direction)."""

    face: Face
    layer: int
    direction: Direction = Direction.CLOCKWISE

    @property
    def axis(self) -> Axis:
        return FACE_AXIS[self.face]

    @property
    def clockwise(self) -> bool:
        return self.direction is Direction.CLOCKWISE

    def inverse(self) -> "Move":
        return Move(self.face, self.layer, self.direction.inverse)

    def __str__(self) -> str:
        return f"{self.face.value}{self.layer}{self.direction.suffix}"

    @classmethod
    def parse(cls, notation: str) -> "Move":
        """
        Parse `<face><layer>` (clockwise) or `<face><layer>'` (counter-clockwise),
        e.g. ``"F2"`` or ``"R0'"``.
        """
        match = _NOTATION.match(notation)
        if match is None:
            raise ValueError(f"Invalid move notation '{notation}'")
        face, layer, prime = match.groups()
        direction = Direction.COUNTER_CLOCKWISE if prime else Direction.CLOCKWISE
        return cls(Face(face), int(layer), direction)


def parse_moves(sequence: str) -> list[Move]:
    """Parse a whitespace separated move sequence such as ``"F2 R0' T1"``."""
    return [Move.parse(token) for token in sequence.split()]


def format_moves(moves) -> str:
    return " ".join(str(move) for move in moves)


def invert_moves(moves) -> list[Move]:
    """Move sequence that undoes `moves`."""
    return [move.inverse() for move in reversed(list(moves))]
