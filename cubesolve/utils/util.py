import chex
import jax.numpy as jnp
import numpy as np


def to_uint8(input: chex.Array, active_bits: int = 1) -> chex.Array:
    """
    Pack an integer (or boolean) array into a flat uint8 buffer, `active_bits` bits per value.

    Values are split into their low `active_bits` bits (least significant first) and the
    resulting bit stream is packed little-endian, so any width in 1-8 packs densely.
    """
    assert 1 <= active_bits <= 8, f"active_bits must be 1-8, got {active_bits}"

    values = jnp.asarray(input).reshape((-1,))
    if active_bits == 8:
        return values.astype(jnp.uint8)
    if values.dtype == jnp.bool_:
        values = values.astype(jnp.uint8)
    assert jnp.issubdtype(values.dtype, jnp.integer), (
        f"Input must be an integer or boolean array, got dtype={values.dtype}"
    )

    shifts = jnp.arange(active_bits, dtype=jnp.uint8)
    bits = (values.astype(jnp.uint8)[:, jnp.newaxis] >> shifts) & 1
    return jnp.packbits(bits.reshape((-1,)), bitorder="little")


def from_uint8(
    packed_bytes: chex.Array, target_shape: tuple[int, ...], active_bits: int = 1
) -> chex.Array:
    """
    Inverse of `to_uint8`: unpack a uint8 buffer into an array of `target_shape`.

    One-bit buffers unpack to booleans, wider ones to uint8.
    """
    assert packed_bytes.dtype == jnp.uint8, f"Input must be uint8, got {packed_bytes.dtype}"
    assert 1 <= active_bits <= 8, f"active_bits must be 1-8, got {active_bits}"

    num_values = int(np.prod(target_shape))
    assert num_values > 0, f"target_shape {target_shape} must hold at least one value"

    if active_bits == 8:
        assert packed_bytes.shape[-1] >= num_values, "Not enough packed data"
        return packed_bytes[:num_values].reshape(target_shape)

    bits = jnp.unpackbits(packed_bytes, count=num_values * active_bits, bitorder="little")
    if active_bits == 1:
        return bits.reshape(target_shape).astype(jnp.bool_)

    bits = bits.reshape((num_values, active_bits)).astype(jnp.uint8)
    shifts = jnp.arange(active_bits, dtype=jnp.uint8)
    values = jnp.sum(bits << shifts, axis=-1, dtype=jnp.uint8)
    return values.reshape(target_shape)


def packed_length(num_values: int, active_bits: int) -> int:
    """Number of bytes `to_uint8` produces for `num_values` values."""
    if active_bits == 8:
        return num_values
    return (num_values * active_bits + 7) // 8


def coloring_str(string: str, color: tuple[int, int, int]) -> str:
    r, g, b = color
    return f"\x1b[38;2;{r};{g};{b}m{string}\x1b[0m"
