import jax
import pytest

from cubesolve.puzzles.lattice_cube import LatticeCube
from cubesolve.search.bounded import BoundedSearch


# Puzzle construction JIT-compiles per instance, so share instances across modules.
@pytest.fixture(scope="session")
def cube2():
    return LatticeCube(size=2, initial_shuffle=0)


@pytest.fixture(scope="session")
def cube3():
    return LatticeCube(size=3, initial_shuffle=0)


@pytest.fixture(scope="session")
def cube4():
    return LatticeCube(size=4, initial_shuffle=0)


@pytest.fixture(scope="session")
def search3(cube3):
    return BoundedSearch(cube3)


@pytest.fixture
def key():
    return jax.random.PRNGKey(0)
