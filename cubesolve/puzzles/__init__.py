from cubesolve.puzzles.lattice_cube import LatticeCube

__all__ = ["LatticeCube"]
