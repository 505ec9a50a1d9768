from xtructure import FieldDescriptor, Xtructurable, xtructure_dataclass

FieldDescriptor = FieldDescriptor


class PuzzleState(Xtructurable):
    """
    Marker base-class for cube states.

    States are created per puzzle instance via `@state_dataclass`, so two cubes of
    different size never share a state class. A state class that stores its fields
    compressed exposes `.packed` / `.unpacked` itself (see ``LatticeCube.State``).
    """

    pass


def state_dataclass(cls):
    """JAX-compatible xtructure dataclass for states and solve configs."""
    return xtructure_dataclass(cls)
