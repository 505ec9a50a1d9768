from cubesolve.utils.util import coloring_str, from_uint8, packed_length, to_uint8

__all__ = ["to_uint8", "from_uint8", "packed_length", "coloring_str"]
