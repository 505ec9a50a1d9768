from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MAX_DEPTH = 100

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SearchConfig:
    """Knobs of the bounded search.

    Attributes:
        max_depth: Maximum number of outer iterations before giving up.
        progress: Show a progress bar over outer iterations.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    progress: bool = False

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SearchConfig":
        """Defaults overridden by ``CUBESOLVE_MAX_DEPTH`` / ``CUBESOLVE_PROGRESS``."""
        environ = os.environ if environ is None else environ
        max_depth = environ.get("CUBESOLVE_MAX_DEPTH")
        progress = environ.get("CUBESOLVE_PROGRESS")
        try:
            max_depth = DEFAULT_MAX_DEPTH if max_depth is None else int(max_depth)
        except ValueError as exc:
            raise ValueError(f"CUBESOLVE_MAX_DEPTH must be an integer, got '{max_depth}'") from exc
        return cls(
            max_depth=max_depth,
            progress=progress is not None and progress.strip().lower() in _TRUTHY,
        )
