"""CLI tool to scramble a lattice cube and solve it with the bounded search.

Example::

    python -m scripts.solve_cube --size 3 --scramble 3 --seed 0

The command prints the scrambled state, the solution found by the search and
the state reached by replaying that solution.
"""

from __future__ import annotations

import logging

import click
import jax
from termcolor import colored

from cubesolve.core.moves import format_moves, invert_moves, parse_moves
from cubesolve.puzzles.lattice_cube import LatticeCube
from cubesolve.search.bounded import BoundedSearch
from cubesolve.search.config import SearchConfig


@click.command()
@click.option("--size", default=3, show_default=True, help="Edge length N of the cube.")
@click.option(
    "--scramble",
    "num_scramble",
    default=3,
    show_default=True,
    help="Number of random turns applied to the solved cube.",
)
@click.option(
    "--seed", default=0, show_default=True, help="PRNG seed for reproducible scrambles."
)
@click.option(
    "--max-depth",
    type=int,
    default=None,
    help="Maximum number of outer search iterations (default: CUBESOLVE_MAX_DEPTH or 100).",
)
@click.option(
    "--moves",
    "move_notation",
    type=str,
    default=None,
    help="Explicit scramble such as \"F2 R0'\"; overrides --scramble.",
)
@click.option("--progress/--no-progress", default=None, help="Show a search progress bar.")
@click.option("-v", "--verbose", is_flag=True, help="Log every search iteration.")
def solve_cube(
    size: int,
    num_scramble: int,
    seed: int,
    max_depth: int | None,
    move_notation: str | None,
    progress: bool | None,
    verbose: bool,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        puzzle = LatticeCube(size=size, initial_shuffle=0)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--size") from exc
    click.echo(f"Loaded puzzle: {puzzle!r}")

    if move_notation is not None:
        try:
            scramble = parse_moves(move_notation)
            state = puzzle.apply_moves(puzzle.get_target_state(), scramble)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--moves") from exc
    else:
        state, scramble = puzzle.scramble(jax.random.PRNGKey(seed), num_scramble)

    click.echo(f"\nScramble ({len(scramble)} moves): {format_moves(scramble)}")
    click.echo(f"Reverse of scramble: {format_moves(invert_moves(scramble))}")
    click.echo("\nScrambled State:")
    click.echo(str(state))

    config = SearchConfig.from_env()
    search = BoundedSearch(puzzle, config=config)
    result = search.search(state, max_depth=max_depth, progress=progress)

    if not result.solved:
        reason = "cancelled" if result.cancelled else "exhausted"
        click.echo(
            colored(
                f"\nNo solution: search {reason} after {result.iterations} iterations "
                f"(best score {result.best_score}).",
                "red",
            )
        )
        raise SystemExit(1)

    click.echo(
        colored(f"\nSolution ({len(result.moves)} moves): ", "green")
        + colored(format_moves(result.moves) or "(already solved)", "yellow")
    )
    click.echo(f"Iterations: {result.iterations}, expansions: {result.expansions}")

    final_state = puzzle.apply_moves(state, result.moves)
    click.echo("\nFinal State:")
    click.echo(str(final_state))


if __name__ == "__main__":
    solve_cube()
