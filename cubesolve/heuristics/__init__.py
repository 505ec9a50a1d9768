from cubesolve.heuristics.dissimilarity import DissimilarityHeuristic

__all__ = ["DissimilarityHeuristic"]
