"""Precondition checks for states handed to the solver from outside."""

from __future__ import annotations

import numpy as np

NUM_COLORS = 6


class MalformedStateError(ValueError):
    """The state's lattice or sticker data is inconsistent with the puzzle it is used with."""


def validate_stickers(stickers, size: int) -> np.ndarray:
    """
    Check a raw sticker array and return it as a ``(size**3, 6)`` uint8 array.

    Accepts ``(size, size, size, 6)`` or ``(size**3, 6)``. Every piece must carry each
    palette colour exactly once.
    """
    array = np.asarray(stickers)
    num_pieces = size**3
    if array.shape not in ((size, size, size, NUM_COLORS), (num_pieces, NUM_COLORS)):
        raise MalformedStateError(
            f"Expected {num_pieces} pieces of {NUM_COLORS} stickers for size {size}, "
            f"got array of shape {array.shape}"
        )
    if not np.issubdtype(array.dtype, np.integer):
        raise MalformedStateError(f"Stickers must be integer colour codes, got dtype={array.dtype}")

    pieces = array.reshape((num_pieces, NUM_COLORS))
    out_of_palette = (pieces < 0) | (pieces >= NUM_COLORS)
    if np.any(out_of_palette):
        bad = int(np.argwhere(np.any(out_of_palette, axis=1))[0, 0])
        raise MalformedStateError(f"Piece {bad} has colours outside the palette: {pieces[bad].tolist()}")

    complete = np.all(np.sort(pieces, axis=1) == np.arange(NUM_COLORS), axis=1)
    if not np.all(complete):
        bad = int(np.argwhere(~complete)[0, 0])
        raise MalformedStateError(
            f"Piece {bad} does not carry every colour exactly once: {pieces[bad].tolist()}"
        )
    return pieces.astype(np.uint8)


def validate_state(puzzle, state) -> None:
    """Fail fast when `state` cannot belong to `puzzle` (wrong size, corrupt stickers)."""
    stickers = getattr(state, "stickers", None)
    if stickers is None:
        raise MalformedStateError(f"{type(state).__name__} has no `stickers` field")
    stickers = np.asarray(stickers)
    if stickers.dtype != np.uint8 or stickers.shape != puzzle.packed_shape:
        raise MalformedStateError(
            f"Packed stickers of shape {stickers.shape} ({stickers.dtype}) do not match a "
            f"size-{puzzle.size} cube, expected {puzzle.packed_shape} (uint8)"
        )
    validate_stickers(puzzle.unpack_stickers(stickers), puzzle.size)
