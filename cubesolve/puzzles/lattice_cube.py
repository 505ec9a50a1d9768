from collections.abc import Iterable, Sequence

import chex
import jax
import jax.numpy as jnp
import numpy as np
from tabulate import tabulate

from cubesolve.core.moves import (
    AXIS_GENERATOR,
    DIRECTION_ORDER,
    FACE_ORDER,
    GENERATOR_FACES,
    Axis,
    Direction,
    Face,
    Move,
    sticker_permutation,
)
from cubesolve.core.puzzle_base import Puzzle
from cubesolve.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass
from cubesolve.core.validation import NUM_COLORS, validate_stickers
from cubesolve.utils.util import coloring_str, from_uint8, packed_length, to_uint8

TYPE = jnp.uint8
ACTIVE_BITS = 3

F, B, L, R, T, D = (face.sticker_index for face in FACE_ORDER)

face_map_legend = {
    F: "front",
    B: "back",
    L: "left",
    R: "right",
    T: "top",
    D: "down",
}
face_map = {
    F: "front",
    B: "back━",
    L: "left━",
    R: "right",
    T: "top━━",
    D: "down━",
}
rgb_map = {
    F: (255, 165, 0),  # orange
    B: (255, 0, 0),  # red
    L: (0, 255, 0),  # green
    R: (0, 0, 255),  # blue
    T: (255, 255, 255),  # white
    D: (255, 255, 0),  # yellow
}


def rotation_matrix(axis: Axis, direction: Direction) -> np.ndarray:
    """Right-handed rotation by +90° (clockwise) or -90° (counter-clockwise) about `axis`."""
    angle = np.pi / 2 if direction is Direction.CLOCKWISE else -np.pi / 2
    c, s = np.cos(angle), np.sin(angle)
    if axis == Axis.X:
        return np.array([[1, 0, 0], [0, c, -s], [0, s, c]])
    if axis == Axis.Y:
        return np.array([[c, 0, s], [0, 1, 0], [-s, 0, c]])
    return np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]])


def lattice_coordinates(size: int) -> np.ndarray:
    """``(size**3, 3)`` coordinates in piece order, index ``(x * size + y) * size + z``."""
    grid = np.meshgrid(*([np.arange(size)] * 3), indexing="ij")
    return np.stack(grid, axis=-1).reshape((-1, 3))


def layer_sticker_sources(size: int, axis: Axis, layer: int, direction: Direction) -> np.ndarray:
    """
    Flat sticker gather for one layer turn: ``new.flat[i] == old.flat[sources[i]]``.

    Pieces of the layer are moved to their rotated position (centred on the lattice,
    rounded back onto integer indices) and get their orthogonal stickers cycled.
    Everything else maps to itself.
    """
    coords = lattice_coordinates(size)
    num_pieces = coords.shape[0]
    offset = (size - 1) / 2

    in_layer = coords[:, axis] == layer
    rotated = (coords[in_layer] - offset) @ rotation_matrix(axis, direction).T
    targets = np.rint(rotated + offset).astype(np.int64)
    target_index = (targets[:, 0] * size + targets[:, 1]) * size + targets[:, 2]

    piece_source = np.arange(num_pieces)
    piece_source[target_index] = np.flatnonzero(in_layer)

    sticker_source = np.tile(np.arange(NUM_COLORS), (num_pieces, 1))
    sticker_source[in_layer] = sticker_permutation(axis, direction)
    return (piece_source[:, np.newaxis] * NUM_COLORS + sticker_source).reshape((-1,))


class LatticeCube(Puzzle):
    """
    N×N×N layer-turn cube modelled as a lattice of six-sticker pieces.

    Sticker identity is tracked by face label only, so the solved state holds the same
    piece ``[F, B, L, R, T, D]`` at every coordinate. Actions are the generator turns
    (faces F, R, T) over every layer in both directions, ordered
    ``((face * size) + layer) * 2 + direction``.
    """

    size: int

    def define_state_class(self) -> PuzzleState:
        str_parser = self.get_string_parser()
        raw_shape = self._raw_shape
        packed_shape = self.packed_shape

        @state_dataclass
        class State:
            stickers: FieldDescriptor.tensor(dtype=TYPE, shape=packed_shape)

            def __str__(self, **kwargs):
                return str_parser(self, **kwargs)

            @property
            def packed(self):
                return State(stickers=to_uint8(self.stickers, ACTIVE_BITS))

            @property
            def unpacked(self):
                return State(stickers=from_uint8(self.stickers, raw_shape, ACTIVE_BITS))

        return State

    def __init__(self, size: int = 3, initial_shuffle: int = 10, **kwargs):
        if size < 2:
            raise ValueError(f"Cube size must be at least 2, got {size}")
        self.size = size
        self.initial_shuffle = initial_shuffle
        self.num_pieces = size**3
        self._raw_shape = (self.num_pieces, NUM_COLORS)
        self.packed_shape = (packed_length(self.num_pieces * NUM_COLORS, ACTIVE_BITS),)
        self.action_size = len(GENERATOR_FACES) * size * len(DIRECTION_ORDER)
        self.generator_moves = tuple(
            Move(face, layer, direction)
            for face in GENERATOR_FACES
            for layer in range(size)
            for direction in DIRECTION_ORDER
        )
        self._action_sources = jnp.asarray(
            np.stack(
                [
                    layer_sticker_sources(size, move.axis, move.layer, move.direction)
                    for move in self.generator_moves
                ]
            ),
            dtype=jnp.int32,
        )
        super().__init__(**kwargs)
        self.solve_config = self.get_solve_config()

    def _solved_stickers(self) -> chex.Array:
        return jnp.tile(jnp.arange(NUM_COLORS, dtype=TYPE), (self.num_pieces, 1))

    def get_target_state(self, key=None) -> "LatticeCube.State":
        return self.State(stickers=self._solved_stickers()).packed

    def get_solve_config(self, key=None, data=None) -> Puzzle.SolveConfig:
        return self.SolveConfig(TargetState=self.get_target_state(key))

    def get_initial_state(
        self, solve_config: Puzzle.SolveConfig, key=None, data=None
    ) -> "LatticeCube.State":
        return self._get_shuffled_state(
            solve_config, solve_config.TargetState, key, num_shuffle=self.initial_shuffle
        )

    def get_actions(
        self,
        solve_config: Puzzle.SolveConfig,
        state: "LatticeCube.State",
        action: chex.Array,
        filled: bool = True,
    ) -> tuple["LatticeCube.State", chex.Array]:
        stickers = state.unpacked.stickers.reshape((-1,))
        moved = stickers[self._action_sources[action]].reshape(self._raw_shape)
        next_state = self.State(stickers=moved).packed
        return jax.lax.cond(
            filled,
            lambda: (next_state, 1.0),
            lambda: (state, jnp.inf),
        )

    def is_solved(self, solve_config: Puzzle.SolveConfig, state: "LatticeCube.State") -> bool:
        return state == solve_config.TargetState

    @property
    def inverse_action_map(self) -> jnp.ndarray | None:
        """
        Clockwise and counter-clockwise turns of the same layer are interleaved
        (direction is the fastest-changing part of the action index), so action ``2k``
        and ``2k + 1`` undo each other.
        """
        actions = jnp.arange(self.action_size)
        inv_map = jnp.reshape(actions, (-1, 2))
        inv_map = jnp.flip(inv_map, axis=1)
        return jnp.reshape(inv_map, (-1,))

    def action_index(self, move: Move) -> int:
        """
        Generator action equivalent to `move`.

        Opposite faces share an axis and a layer numbering, so ``B1`` is the same
        turn as ``F1``.
        """
        if not 0 <= move.layer < self.size:
            raise ValueError(f"Layer {move.layer} is out of range for a size-{self.size} cube")
        face = AXIS_GENERATOR[Face(move.face).axis]
        face_idx = GENERATOR_FACES.index(face)
        direction_idx = DIRECTION_ORDER.index(Direction(move.direction))
        return (face_idx * self.size + move.layer) * 2 + direction_idx

    def action_to_move(self, action: int) -> Move:
        if action < 0 or action >= self.action_size:
            raise ValueError(
                f"Action {action} is out of bounds for action space size {self.action_size}."
            )
        return self.generator_moves[int(action)]

    def action_to_string(self, action: int) -> str:
        return str(self.action_to_move(action))

    def apply_move(self, state: "LatticeCube.State", move: Move) -> "LatticeCube.State":
        next_state, _ = self.get_actions(self.solve_config, state, self.action_index(move))
        return next_state

    def apply_moves(self, state: "LatticeCube.State", moves: Iterable[Move]) -> "LatticeCube.State":
        for move in moves:
            state = self.apply_move(state, move)
        return state

    def scramble(self, key: chex.PRNGKey, num_moves: int) -> tuple["LatticeCube.State", list[Move]]:
        """
        Scramble the solved cube with exactly `num_moves` random turns, never undoing the
        previous one, and return the turns alongside the state.

        Draws from the same sampler as :meth:`get_initial_state`, without its parity jitter.
        """
        state = self.solve_config.TargetState
        if num_moves == 0:
            return state, []
        actions = np.asarray(self.sample_scramble_actions(key, num_moves))
        for action in actions:
            state, _ = self.get_actions(self.solve_config, state, int(action))
        return state, [self.action_to_move(int(action)) for action in actions]

    def unpack_stickers(self, packed: chex.Array) -> np.ndarray:
        return np.asarray(from_uint8(jnp.asarray(packed), self._raw_shape, ACTIVE_BITS))

    def stickers_of(self, state: "LatticeCube.State") -> np.ndarray:
        """Sticker colours as a ``(size, size, size, 6)`` array indexed ``[x, y, z, face]``."""
        return self.unpack_stickers(state.stickers).reshape((self.size,) * 3 + (NUM_COLORS,))

    def from_stickers(self, stickers: np.ndarray | Sequence) -> "LatticeCube.State":
        """Build a state from ``(size, size, size, 6)`` or ``(size**3, 6)`` colour codes."""
        pieces = validate_stickers(stickers, self.size)
        return self.State(stickers=jnp.asarray(pieces, dtype=TYPE)).packed

    @staticmethod
    def fingerprint(state: "LatticeCube.State") -> bytes:
        """Packed sticker buffer as bytes; equal states and only equal states share it."""
        return np.asarray(state.stickers).tobytes()

    @staticmethod
    def equals(a: "LatticeCube.State", b: "LatticeCube.State") -> bool:
        return bool(np.array_equal(np.asarray(a.stickers), np.asarray(b.stickers)))

    def get_string_parser(self):
        size = self.size

        def parser(state: "LatticeCube.State", **_):
            stickers = self.stickers_of(state)

            # Outer faces as seen from outside the cube, top row first.
            face_grids = {
                T: stickers[:, -1, :, T].T,
                F: stickers[:, :, -1, F].T[::-1],
                R: stickers[-1, :, :, R][::-1, ::-1],
                B: stickers[:, :, 0, B].T[::-1, ::-1],
                L: stickers[0, :, :, L][::-1],
                D: stickers[:, 0, :, D].T[::-1],
            }

            def get_empty_face_string():
                return "\n".join(["  " * (size + 2) for _ in range(size + 2)])

            def color_legend():
                return "\n".join(
                    [f"{face_map_legend[i]:<6}:{coloring_str('■', rgb_map[i])}" for i in range(6)]
                )

            def get_face_string(face):
                inner_width = 2 * size - 1
                string = f"┏━{face_map[face].center(inner_width, '━')}━┓\n"
                for row in face_grids[face]:
                    tokens = " ".join(coloring_str("■", rgb_map[int(color)]) for color in row)
                    string += f"┃ {tokens} ┃\n"
                string += f"┗━{'━' * inner_width}━┛\n"
                return string

            return tabulate(
                [
                    [color_legend(), (".\n" + get_face_string(T))],
                    [
                        get_face_string(L),
                        get_face_string(F),
                        get_face_string(R),
                        get_face_string(B),
                    ],
                    [get_empty_face_string(), get_face_string(D)],
                ],
                tablefmt="plain",
                rowalign="center",
            )

        return parser
