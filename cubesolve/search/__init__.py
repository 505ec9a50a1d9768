"""Bounded search over generator turns and its public entry points."""

from cubesolve.search.bounded import (
    BoundedSearch,
    CancellationToken,
    SearchResult,
    apply,
    solve,
)
from cubesolve.search.config import SearchConfig

__all__ = [
    "BoundedSearch",
    "CancellationToken",
    "SearchConfig",
    "SearchResult",
    "solve",
    "apply",
]
