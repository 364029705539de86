"""Engine configuration.

`EngineConfig` is an immutable value; build one directly or from
environment variables:

    TML_VIEWS_DIR   views directory
    TML_CACHE       cache compiled routines (1/true/yes/on)
    TML_MAX_DEPTH   recursion ceiling for component resolution
    TML_ENV         "production" turns caching on when TML_CACHE is unset

"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from tml.environment.loaders import DEFAULT_EXTENSION

DEFAULT_MAX_DEPTH = 100

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Settings for an `Engine`.

    Attributes:
        views_dir: Base directory holding ``.tml`` components
        cache: Reuse compiled routines across renders
        max_depth: Maximum component/include nesting per page render
        extension: File extension of component sources
        encoding: Encoding of component sources
    """

    views_dir: str | Path
    cache: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    extension: str = DEFAULT_EXTENSION
    encoding: str = "utf-8"

    @classmethod
    def from_environ(
        cls,
        views_dir: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> EngineConfig:
        """Build a config from ``TML_*`` environment variables.

        Raises:
            ValueError: If no views directory is given or configured
        """
        env = os.environ if environ is None else environ
        views = views_dir if views_dir is not None else env.get("TML_VIEWS_DIR")
        if not views:
            raise ValueError("No views directory: pass views_dir or set TML_VIEWS_DIR")

        raw_cache = env.get("TML_CACHE")
        if raw_cache is None:
            cache = env.get("TML_ENV", "").lower() == "production"
        else:
            cache = raw_cache.strip().lower() in _TRUTHY

        return cls(
            views_dir=views,
            cache=cache,
            max_depth=int(env.get("TML_MAX_DEPTH", DEFAULT_MAX_DEPTH)),
        )
