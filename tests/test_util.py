import jax.numpy as jnp
import numpy as np
import pytest

from cubesolve.utils.util import coloring_str, from_uint8, packed_length, to_uint8


@pytest.mark.parametrize("active_bits", [1, 2, 3, 4, 5, 8])
def test_pack_unpack_roundtrip(active_bits):
    rng = np.random.default_rng(active_bits)
    values = rng.integers(0, 2**active_bits, size=(7, 6)).astype(np.uint8)

    packed = to_uint8(jnp.asarray(values), active_bits)
    assert packed.dtype == jnp.uint8
    assert packed.shape == (packed_length(values.size, active_bits),)

    restored = from_uint8(packed, values.shape, active_bits)
    if active_bits == 1:
        assert restored.dtype == jnp.bool_
    np.testing.assert_array_equal(np.asarray(restored).astype(np.uint8), values)


def test_boolean_input_packs_to_bits():
    mask = jnp.array([True, False, True, True, False, False, False, False, True])
    packed = to_uint8(mask)
    # Little-endian bit order: the first value is the lowest bit.
    assert packed.tolist() == [0b00001101, 0b00000001]
    np.testing.assert_array_equal(from_uint8(packed, (9,)), mask)


def test_three_bit_packing_is_dense():
    # A 3x3x3 lattice of six stickers per piece.
    assert packed_length(27 * 6, 3) == 61
    assert packed_length(8 * 6, 3) == 18
    assert packed_length(10, 8) == 10


def test_from_uint8_rejects_non_uint8():
    with pytest.raises(AssertionError):
        from_uint8(jnp.zeros((4,), dtype=jnp.int32), (4,), 3)


def test_coloring_str_wraps_with_truecolor_escape():
    text = coloring_str("■", (255, 165, 0))
    assert text.startswith("\x1b[38;2;255;165;0m")
    assert text.endswith("\x1b[0m")
    assert "■" in text
