"""
Class-weighted mismatch heuristic.

Every piece that differs from the solved piece at its coordinate adds a weight that
depends on where the piece sits: corners are cheap to fix with layer turns, edges
less so, and anything deeper (face centres, inner pieces) dominates. The weights
approximate moves-to-fix rather than counting mismatches, which gives the search
a usable pruning signal. The estimate can overshoot, so it is a greedy cost proxy
and not a lower bound.
"""

import chex
import jax
import jax.numpy as jnp
import numpy as np

from cubesolve.core.puzzle_base import Puzzle

CORNER = 0
EDGE = 1
CENTER = 2

CORNER_WEIGHT = 1
EDGE_WEIGHT = 8


def center_weight(size: int) -> int:
    return 96 * (size - 2) + EDGE_WEIGHT


def piece_classes(size: int) -> np.ndarray:
    """Class (CORNER, EDGE or CENTER) of every lattice coordinate, in piece order."""
    extreme = np.isin(np.arange(size), (0, size - 1))
    grid = np.meshgrid(extreme, extreme, extreme, indexing="ij")
    num_extreme = sum(axis.astype(np.int32) for axis in grid).reshape((-1,))
    return np.select([num_extreme == 3, num_extreme == 2], [CORNER, EDGE], default=CENTER)


def piece_weights(size: int) -> np.ndarray:
    weights = np.array([CORNER_WEIGHT, EDGE_WEIGHT, center_weight(size)], dtype=np.int32)
    return weights[piece_classes(size)]


# Module-level kernels: compiled once per state class, shared by every heuristic instance.
@jax.jit
def weighted_mismatch(weights: chex.Array, target: Puzzle.State, state: Puzzle.State) -> chex.Array:
    mismatched = jnp.any(state.unpacked.stickers != target.unpacked.stickers, axis=-1)
    return jnp.sum(jnp.where(mismatched, weights, 0), dtype=jnp.int32)


@jax.jit
def batched_weighted_mismatch(
    weights: chex.Array, target: Puzzle.State, states: Puzzle.State
) -> chex.Array:
    return jax.vmap(weighted_mismatch, in_axes=(None, None, 0))(weights, target, states)


class DissimilarityHeuristic:
    """Distance estimate from a state to the puzzle's target; zero exactly when solved."""

    def __init__(self, puzzle: Puzzle):
        self.puzzle = puzzle
        self.weights = jnp.asarray(piece_weights(puzzle.size))

    def distance(self, solve_config: Puzzle.SolveConfig, state: Puzzle.State) -> chex.Array:
        return weighted_mismatch(self.weights, solve_config.TargetState, state)

    def batched_distance(self, solve_config: Puzzle.SolveConfig, states: Puzzle.State) -> chex.Array:
        return batched_weighted_mismatch(self.weights, solve_config.TargetState, states)

    def score(self, state: Puzzle.State) -> int:
        return int(self.distance(self.puzzle.solve_config, state))
