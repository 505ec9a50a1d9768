"""
Core puzzle framework components.

Base classes and state dataclasses, plus the move vocabulary shared by the
puzzle, the heuristic and the search.
"""

from cubesolve.core.moves import Axis, Direction, Face, Move, format_moves, parse_moves
from cubesolve.core.puzzle_base import Puzzle
from cubesolve.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass
from cubesolve.core.selection import Selection
from cubesolve.core.validation import MalformedStateError

__all__ = [
    "Puzzle",
    "PuzzleState",
    "FieldDescriptor",
    "state_dataclass",
    "Axis",
    "Direction",
    "Face",
    "Move",
    "format_moves",
    "parse_moves",
    "Selection",
    "MalformedStateError",
]
