import jax
import jax.numpy as jnp
import numpy as np
import pytest

from cubesolve.core.moves import Axis, Direction, Face, Move, parse_moves
from cubesolve.core.validation import MalformedStateError, validate_state
from cubesolve.puzzles.lattice_cube import LatticeCube, layer_sticker_sources
from cubesolve.utils.util import to_uint8

SOLVED_PIECE = np.arange(6)


def random_pieces(size, seed=0):
    """A lattice where every piece carries its own shuffled sticker order."""
    rng = np.random.default_rng(seed)
    return np.stack([rng.permutation(6) for _ in range(size**3)]).reshape((size,) * 3 + (6,))


def test_size_must_be_at_least_two():
    with pytest.raises(ValueError, match="at least 2"):
        LatticeCube(size=1)


def test_action_space(cube3):
    assert cube3.action_size == 18
    assert len(cube3.generator_moves) == 18
    assert cube3.is_reversible


@pytest.mark.parametrize(
    "action, notation",
    [(0, "F0"), (1, "F0'"), (5, "F2'"), (10, "R2"), (12, "T0"), (17, "T2'")],
)
def test_action_to_string(cube3, action, notation):
    assert cube3.action_to_string(action) == notation
    assert cube3.action_index(Move.parse(notation)) == action


def test_action_out_of_range(cube3):
    with pytest.raises(ValueError, match="out of bounds"):
        cube3.action_to_move(18)
    with pytest.raises(ValueError, match="out of range"):
        cube3.action_index(Move(Face.F, 3))


def test_solved_state(cube3):
    stickers = cube3.stickers_of(cube3.get_target_state())
    assert stickers.shape == (3, 3, 3, 6)
    assert np.all(stickers == SOLVED_PIECE)
    assert bool(cube3.is_solved(cube3.solve_config, cube3.get_target_state()))


def test_move_relabels_whole_front_layer(cube3):
    state = cube3.apply_move(cube3.get_target_state(), Move(Face.F, 2, Direction.CLOCKWISE))
    stickers = cube3.stickers_of(state)

    # Turning about z: T<-R, R<-D, D<-L, L<-T; F and B keep their colour.
    np.testing.assert_array_equal(stickers[:, :, 2], np.broadcast_to([0, 1, 4, 5, 3, 2], (3, 3, 6)))
    np.testing.assert_array_equal(stickers[:, :, :2], np.broadcast_to(SOLVED_PIECE, (3, 3, 2, 6)))
    assert not bool(cube3.is_solved(cube3.solve_config, state))


def test_move_relocates_pieces(cube3):
    pieces = random_pieces(3)
    state = cube3.from_stickers(pieces)
    moved = cube3.stickers_of(cube3.apply_move(state, Move(Face.F, 2)))

    relabel = [0, 1, 4, 5, 3, 2]
    for x in range(3):
        for y in range(3):
            # (x, y) rotates to (2 - y, x) on the z = 2 layer.
            np.testing.assert_array_equal(moved[2 - y, x, 2], pieces[x, y, 2][relabel])
    np.testing.assert_array_equal(moved[:, :, :2], pieces[:, :, :2])


def test_apply_does_not_mutate_input(cube3):
    state = cube3.from_stickers(random_pieces(3, seed=1))
    before = np.asarray(state.stickers).copy()
    cube3.apply_moves(state, parse_moves("F2 R1 T0'"))
    np.testing.assert_array_equal(np.asarray(state.stickers), before)


@pytest.mark.parametrize("size", [2, 3, 4])
def test_move_then_inverse_is_identity(size, cube2, cube3, cube4):
    puzzle = {2: cube2, 3: cube3, 4: cube4}[size]
    state = puzzle.from_stickers(random_pieces(size, seed=size))
    for move in puzzle.generator_moves:
        restored = puzzle.apply_move(puzzle.apply_move(state, move), move.inverse())
        assert puzzle.equals(restored, state), str(move)


@pytest.mark.parametrize("size", [2, 3, 4])
def test_four_turns_are_identity(size, cube2, cube3, cube4):
    puzzle = {2: cube2, 3: cube3, 4: cube4}[size]
    state = puzzle.from_stickers(random_pieces(size, seed=size + 10))
    for move in puzzle.generator_moves:
        assert puzzle.equals(puzzle.apply_moves(state, [move] * 4), state), str(move)


def test_moves_preserve_sticker_multiset(cube3, key):
    state, _ = cube3.scramble(key, 12)
    stickers = cube3.stickers_of(state).reshape((-1, 6))
    assert np.all(np.sort(stickers, axis=1) == SOLVED_PIECE)
    np.testing.assert_array_equal(np.bincount(stickers.reshape((-1,)), minlength=6), [27] * 6)
    validate_state(cube3, state)


@pytest.mark.parametrize(
    "back, front",
    [("B1", "F1"), ("L0'", "R0'"), ("D2", "T2")],
)
def test_opposite_face_addresses_same_layer(cube3, back, front):
    state = cube3.from_stickers(random_pieces(3, seed=3))
    assert cube3.action_index(Move.parse(back)) == cube3.action_index(Move.parse(front))
    assert cube3.equals(
        cube3.apply_move(state, Move.parse(back)), cube3.apply_move(state, Move.parse(front))
    )


def test_layer_sticker_sources_are_permutations():
    for axis in Axis:
        for layer in range(3):
            for direction in Direction:
                sources = layer_sticker_sources(3, axis, layer, direction)
                assert sorted(sources.tolist()) == list(range(27 * 6))


def test_inverse_action_map(cube3):
    inv_map = np.asarray(cube3.inverse_action_map)
    np.testing.assert_array_equal(inv_map[inv_map], np.arange(cube3.action_size))
    for action, inverse in enumerate(inv_map):
        assert cube3.action_to_move(inverse) == cube3.action_to_move(action).inverse()


def test_get_neighbours(cube3):
    state = cube3.get_target_state()
    neighbours, costs = cube3.get_neighbours(cube3.solve_config, state)
    assert neighbours.stickers.shape == (18,) + cube3.packed_shape
    np.testing.assert_array_equal(costs, np.ones(18))
    for action, move in enumerate(cube3.generator_moves):
        child = cube3.State(stickers=neighbours.stickers[action])
        assert cube3.equals(child, cube3.apply_move(state, move))


def test_unfilled_action_is_a_noop(cube3):
    state = cube3.get_target_state()
    next_state, cost = cube3.get_actions(cube3.solve_config, state, 0, False)
    assert cube3.equals(next_state, state)
    assert np.isinf(cost)


def test_get_inverse_neighbours(cube3):
    state = cube3.from_stickers(random_pieces(3, seed=4))
    predecessors, _ = cube3.get_inverse_neighbours(cube3.solve_config, state)
    for action in range(cube3.action_size):
        previous = cube3.State(stickers=predecessors.stickers[action])
        next_state, _ = cube3.get_actions(cube3.solve_config, previous, action)
        assert cube3.equals(next_state, state)


def test_scramble_is_reproducible_and_replays(cube3):
    state, moves = cube3.scramble(jax.random.PRNGKey(7), 6)
    again, moves_again = cube3.scramble(jax.random.PRNGKey(7), 6)
    assert moves == moves_again
    assert cube3.equals(state, again)
    assert len(moves) == 6
    assert cube3.equals(cube3.apply_moves(cube3.get_target_state(), moves), state)
    for previous, move in zip(moves, moves[1:]):
        assert move != previous.inverse()


def test_get_inits(cube3, key):
    solve_config, state = cube3.get_inits(key)
    assert cube3.equals(solve_config.TargetState, cube3.get_target_state())
    validate_state(cube3, state)


def test_fingerprint(cube3):
    solved = cube3.get_target_state()
    moved = cube3.apply_move(solved, Move(Face.T, 0))
    assert isinstance(cube3.fingerprint(solved), bytes)
    assert cube3.fingerprint(solved) == cube3.fingerprint(cube3.get_target_state())
    assert cube3.fingerprint(solved) != cube3.fingerprint(moved)


def test_from_stickers_roundtrip(cube3):
    pieces = random_pieces(3, seed=5)
    np.testing.assert_array_equal(cube3.stickers_of(cube3.from_stickers(pieces)), pieces)
    flat = pieces.reshape((27, 6))
    assert cube3.equals(cube3.from_stickers(flat), cube3.from_stickers(pieces))


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda p: p[:2], "shape"),
        (lambda p: p.astype(np.float32), "integer"),
        (lambda p: np.where(p == 5, 6, p), "outside the palette"),
        (lambda p: np.where(p == 5, 4, p), "exactly once"),
    ],
)
def test_from_stickers_rejects_malformed(cube3, mutate, message):
    pieces = random_pieces(3, seed=6)
    with pytest.raises(MalformedStateError, match=message):
        cube3.from_stickers(mutate(pieces))


def test_validate_state_rejects_corrupt_packing(cube3, cube2):
    raw = np.tile(SOLVED_PIECE, (27, 1)).astype(np.uint8)
    raw[0] = [0, 0, 2, 3, 4, 5]
    corrupt = cube3.State(stickers=to_uint8(jnp.asarray(raw), 3))
    with pytest.raises(MalformedStateError, match="exactly once"):
        validate_state(cube3, corrupt)
    with pytest.raises(MalformedStateError, match="do not match"):
        validate_state(cube3, cube2.get_target_state())
    with pytest.raises(MalformedStateError, match="no `stickers` field"):
        validate_state(cube3, object())


def test_string_rendering(cube3):
    text = str(cube3.get_target_state())
    for label in ("front", "back", "left", "right", "top", "down"):
        assert label in text
    assert text.count("■") == 6 * 9 + 6


def test_batched_neighbours_and_is_solved(cube3):
    solved = cube3.get_target_state()
    moved = cube3.apply_move(solved, Move(Face.R, 0))
    batch = cube3.State(stickers=jnp.stack([solved.stickers, moved.stickers]))

    neighbours, costs = cube3.batched_get_neighbours(cube3.solve_config, batch, True)
    assert neighbours.stickers.shape == (18, 2) + cube3.packed_shape
    assert costs.shape == (18, 2)

    # R0' from the moved state is the solved cube again.
    undo = cube3.action_index(Move(Face.R, 0).inverse())
    child = cube3.State(stickers=neighbours.stickers[undo, 1])
    assert cube3.equals(child, solved)

    np.testing.assert_array_equal(
        cube3.batched_is_solved(cube3.solve_config, batch), [True, False]
    )


def test_constructs_state_class_and_initial_state():
    puzzle = LatticeCube(size=2, initial_shuffle=3)
    solve_config, state = puzzle.get_inits(jax.random.PRNGKey(3))
    assert isinstance(state, puzzle.State)
    assert state.stickers.shape == puzzle.packed_shape
    assert puzzle.equals(solve_config.TargetState, puzzle.get_target_state())
    validate_state(puzzle, state)


def test_scramble_draws_from_shared_sampler(cube3):
    key = jax.random.PRNGKey(11)
    actions = np.asarray(cube3.sample_scramble_actions(key, 5))
    inv_map = np.asarray(cube3.inverse_action_map)
    assert actions.shape == (5,)
    assert np.all(actions[1:] != inv_map[actions[:-1]])

    _, moves = cube3.scramble(key, 5)
    assert moves == [cube3.action_to_move(int(action)) for action in actions]


def test_scramble_of_zero_moves(cube3, key):
    state, moves = cube3.scramble(key, 0)
    assert moves == []
    assert cube3.equals(state, cube3.get_target_state())


@pytest.mark.parametrize("seed", range(4))
def test_initial_state_is_at_most_one_turn_from_solved(cube3, seed):
    # initial_shuffle=0 plus the parity jitter of zero or one turn.
    solve_config, state = cube3.get_inits(jax.random.PRNGKey(seed))
    target = solve_config.TargetState
    if cube3.equals(state, target):
        return
    assert any(
        cube3.equals(cube3.apply_move(state, move.inverse()), target)
        for move in cube3.generator_moves
    )
