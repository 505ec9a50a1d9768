"""
Bounded iterative-deepening search over generator turns.

Each outer iteration runs a breadth-first expansion from the best state found so far,
admitting only children that improve on that root by at least the current expansion
depth. Nodes close to the best score are carried into the next iteration, the visited
set is not. This trades optimality and completeness for a search that stays tractable
on a combinatorially huge state space: results are best effort, especially for N >= 4.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, NamedTuple, Optional

import jax.numpy as jnp
import numpy as np
from tqdm import tqdm

from cubesolve.core.moves import Move, format_moves
from cubesolve.core.puzzle_state import PuzzleState
from cubesolve.core.validation import validate_state
from cubesolve.heuristics.dissimilarity import EDGE_WEIGHT, DissimilarityHeuristic
from cubesolve.puzzles.lattice_cube import LatticeCube
from cubesolve.search.config import DEFAULT_MAX_DEPTH, SearchConfig

logger = logging.getLogger(__name__)

ShouldCancel = Callable[[], bool]


class SearchNode(NamedTuple):
    state: PuzzleState
    score: int
    path: tuple[Move, ...]
    depth: int
    key: bytes


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one search call. ``moves`` is None when no solution was found."""

    moves: Optional[list[Move]]
    iterations: int
    expansions: int
    best_score: int
    cancelled: bool = False

    @property
    def solved(self) -> bool:
        return self.moves is not None


class CancellationToken:
    """Cooperative cancellation flag; also usable directly as a ``should_cancel`` callable."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self.cancelled


def _layer_threshold(size: int) -> int:
    return 96 * (size - 2)


def expansion_depth(score: int, size: int) -> int:
    """Breadth-first depth of one outer iteration: deeper when the root is close to solved."""
    if score <= EDGE_WEIGHT:
        return min(size, 4)
    if score <= _layer_threshold(size):
        return min(size, 3)
    return min(size - 1, 2)


def carry_tolerance(depth: int, size: int) -> int:
    """How far below the root's score a node must be to survive into the next iteration."""
    if depth == min(size - 1, 2):
        return 1
    if depth == min(size, 3):
        return EDGE_WEIGHT
    return _layer_threshold(size)


@dataclass
class _Iteration:
    frontier: list[SearchNode]
    expansions: int = 0
    solution: Optional[tuple[Move, ...]] = None
    cancelled: bool = False
    visited: set[bytes] = field(default_factory=set)


class BoundedSearch:
    """
    Hybrid of iterative deepening and beam search.

    Args:
        puzzle: The cube whose states are searched.
        heuristic: Scores states; defaults to :class:`DissimilarityHeuristic`.
        config: Default iteration budget and progress reporting.
    """

    def __init__(
        self,
        puzzle: LatticeCube,
        heuristic: Optional[DissimilarityHeuristic] = None,
        config: Optional[SearchConfig] = None,
    ):
        self.puzzle = puzzle
        self.heuristic = heuristic if heuristic is not None else DissimilarityHeuristic(puzzle)
        self.config = config if config is not None else SearchConfig()
        self.solve_config = puzzle.solve_config

    def search(
        self,
        state: PuzzleState,
        max_depth: Optional[int] = None,
        should_cancel: Optional[ShouldCancel] = None,
        progress: Optional[bool] = None,
    ) -> SearchResult:
        """Look for a move sequence taking `state` to the solved cube.

        Raises:
            MalformedStateError: If `state` does not describe a cube of this puzzle's size.
            ValueError: If `max_depth` is negative.
        """
        max_depth = self.config.max_depth if max_depth is None else max_depth
        progress = self.config.progress if progress is None else progress
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        validate_state(self.puzzle, state)
        should_cancel = should_cancel or (lambda: False)
        size = self.puzzle.size

        root = SearchNode(state, self.heuristic.score(state), (), 0, self.puzzle.fingerprint(state))
        if root.score == 0:
            return SearchResult(moves=[], iterations=0, expansions=0, best_score=0)

        carried: list[SearchNode] = []
        expansions = 0
        outer = range(max_depth)
        if progress:
            outer = tqdm(outer, desc="search", leave=False)

        for iteration in outer:
            if should_cancel():
                return self._cancelled(iteration, expansions, root.score)

            depth = expansion_depth(root.score, size)
            tolerance = carry_tolerance(depth, size)
            result = self._run_iteration(root, carried, depth, should_cancel)
            expansions += result.expansions
            logger.debug(
                "iteration %d: root score %d, depth %d, frontier %d, carried %d",
                iteration,
                root.score,
                depth,
                len(result.frontier),
                len(carried),
            )

            if result.solution is not None:
                moves = list(result.solution)
                logger.info(
                    "Solved in %d moves after %d iterations (%d expansions): %s",
                    len(moves),
                    iteration + 1,
                    expansions,
                    format_moves(moves),
                )
                return SearchResult(
                    moves=moves, iterations=iteration + 1, expansions=expansions, best_score=0
                )
            if result.cancelled:
                return self._cancelled(iteration + 1, expansions, root.score)

            best = min(result.frontier, key=lambda node: node.score)
            threshold = max(0, root.score - tolerance)
            carried = sorted(
                (node._replace(depth=0) for node in result.frontier if node.score <= threshold),
                key=lambda node: node.score,
            )
            root = best._replace(depth=0)

        logger.info(
            "No solution within %d iterations (%d expansions, best score %d)",
            max_depth,
            expansions,
            root.score,
        )
        return SearchResult(
            moves=None, iterations=max_depth, expansions=expansions, best_score=root.score
        )

    def _cancelled(self, iterations: int, expansions: int, best_score: int) -> SearchResult:
        logger.info("Search cancelled after %d iterations", iterations)
        return SearchResult(
            moves=None,
            iterations=iterations,
            expansions=expansions,
            best_score=best_score,
            cancelled=True,
        )

    def _run_iteration(
        self,
        root: SearchNode,
        carried: list[SearchNode],
        depth: int,
        should_cancel: ShouldCancel,
    ) -> _Iteration:
        """
        FIFO expansion of the carried pool followed by the root, down to `depth`.

        A child is admitted when it beats the root's score by at least `depth`; a
        child already expanded in this iteration is skipped, and the first zero-score
        child ends the search.
        """
        result = _Iteration(frontier=[*carried, root])
        frontier = result.frontier
        visited = result.visited
        admit_below = root.score - depth
        front = 0

        while front < len(frontier) and frontier[front].depth <= depth:
            if should_cancel():
                result.cancelled = True
                return result

            node = frontier[front]
            front += 1
            if node.key in visited:
                continue

            neighbours, _ = self.puzzle.get_neighbours(self.solve_config, node.state)
            scores = np.asarray(self.heuristic.batched_distance(self.solve_config, neighbours))
            stickers = np.asarray(neighbours.stickers)

            for action, move in enumerate(self.puzzle.generator_moves):
                key = stickers[action].tobytes()
                if key in visited:
                    continue
                score = int(scores[action])
                path = node.path + (move,)
                if score == 0:
                    result.solution = path
                    result.expansions += 1
                    return result
                if score <= admit_below:
                    child = self.puzzle.State(stickers=jnp.asarray(stickers[action]))
                    frontier.append(SearchNode(child, score, path, node.depth + 1, key))

            visited.add(node.key)
            result.expansions += 1

        return result


def solve(
    puzzle: LatticeCube,
    state: PuzzleState,
    max_depth: int = DEFAULT_MAX_DEPTH,
    should_cancel: Optional[ShouldCancel] = None,
) -> Optional[list[Move]]:
    """
    Moves that take `state` to the solved cube when applied in order, or None when the
    search budget of `max_depth` outer iterations runs out (or the search is cancelled).
    """
    return BoundedSearch(puzzle).search(state, max_depth, should_cancel=should_cancel).moves


def apply(puzzle: LatticeCube, state: PuzzleState, move: Move) -> PuzzleState:
    """Apply a single turn; the input state is left untouched."""
    return puzzle.apply_move(state, move)
