"""
cubesolve: N×N×N layer-turn cubes on JAX

A lattice cube model with precomputed layer-turn permutations, a class-weighted
mismatch heuristic and a bounded iterative-deepening solver.
"""

# Core framework
from cubesolve.core import (
    Axis,
    Direction,
    Face,
    FieldDescriptor,
    MalformedStateError,
    Move,
    Puzzle,
    PuzzleState,
    Selection,
    state_dataclass,
)
from cubesolve.heuristics import DissimilarityHeuristic
from cubesolve.puzzles import LatticeCube
from cubesolve.search import (
    BoundedSearch,
    CancellationToken,
    SearchConfig,
    SearchResult,
    apply,
    solve,
)

__version__ = "0.1.0"

__all__ = [
    # Core framework
    "Puzzle",
    "PuzzleState",
    "FieldDescriptor",
    "state_dataclass",
    "MalformedStateError",
    # Moves
    "Axis",
    "Direction",
    "Face",
    "Move",
    "Selection",
    # Puzzle
    "LatticeCube",
    # Search
    "DissimilarityHeuristic",
    "BoundedSearch",
    "CancellationToken",
    "SearchConfig",
    "SearchResult",
    "solve",
    "apply",
]
