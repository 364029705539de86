"""Component loaders for the tml engine.

Loaders turn a component path (slash-separated, relative, no extension)
into source text. They implement ``get_source(path)`` returning
``(source, location)`` and ``list_templates()`` returning every component
path they can serve.

Built-in Loaders:
- `FileSystemLoader`: Load ``<path>.tml`` files below a views directory
- `DictLoader`: Load from an in-memory mapping (testing/embedded)

Path Safety:
Every lookup validates the component path before touching any resource.
A path that normalizes outside the base (``../secret``, ``/etc/passwd``)
raises `PathTraversalError`.

Thread-Safety:
Loaders hold no mutable state after construction and are safe for
concurrent ``get_source()`` calls.

"""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path

from tml.environment.exceptions import PathTraversalError, TemplateNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".tml"


def check_component_path(name: str) -> str:
    """Return the normalized component path, rejecting any escape from the base.

    Raises:
        PathTraversalError: If the path is absolute or climbs above the base
    """
    normalized = posixpath.normpath(name.replace("\\", "/"))
    if (
        posixpath.isabs(normalized)
        or normalized == ".."
        or normalized.startswith("../")
    ):
        raise PathTraversalError(name)
    return normalized


def safe_path(base_dir: str | Path, name: str, extension: str = DEFAULT_EXTENSION) -> Path:
    """Resolve *name* to a file below *base_dir*, appending *extension*.

    Resolution is purely lexical; nothing is read from disk.

    Raises:
        PathTraversalError: If the resolved location is outside *base_dir*
    """
    base = os.path.abspath(base_dir)
    resolved = os.path.abspath(os.path.join(base, f"{name}{extension}"))
    if not resolved.startswith(base + os.sep) and resolved != base:
        raise PathTraversalError(name)
    return Path(resolved)


class FileSystemLoader:
    """Load components from ``.tml`` files below a views directory.

    Attributes:
        base_dir: Absolute views directory
        extension: File extension appended to component paths

    Example:
            >>> loader = FileSystemLoader("views/")
            >>> source, location = loader.get_source("pages/home")
            >>> location
            '/srv/app/views/pages/home.tml'

    Raises:
        FileNotFoundError: If the views directory does not exist
        TemplateNotFoundError: If a component file does not exist

    """

    __slots__ = ("_encoding", "base_dir", "extension")

    def __init__(
        self,
        base_dir: str | Path,
        *,
        extension: str = DEFAULT_EXTENSION,
        encoding: str = "utf-8",
    ):
        path = Path(base_dir).absolute()
        if not path.is_dir():
            raise FileNotFoundError(f"Views directory does not exist: {path}")
        self.base_dir = path
        self.extension = extension
        self._encoding = encoding

    def resolve(self, name: str) -> Path:
        """Validate *name* and return the file location backing it."""
        return safe_path(self.base_dir, check_component_path(name), self.extension)

    def get_source(self, name: str) -> tuple[str, str]:
        """Load component source from the filesystem."""
        path = self.resolve(name)
        if not path.is_file():
            raise TemplateNotFoundError(name, str(path))
        logger.debug("Loading component %s from %s", name, path)
        return path.read_text(self._encoding), str(path)

    def list_templates(self) -> list[str]:
        """List every component path below the views directory."""
        return sorted(
            path.relative_to(self.base_dir).with_suffix("").as_posix()
            for path in self.base_dir.rglob(f"*{self.extension}")
            if path.is_file()
        )


class DictLoader:
    """Load components from an in-memory mapping of path → source.

    Example:
            >>> loader = DictLoader({
            ...     "layout": "<template><main>@children</main></template>",
            ...     "page": "<template>@component(layout)\\nHi\\n@end</template>",
            ... })
            >>> Engine(loader=loader).render_page("page").html

    Raises:
        TemplateNotFoundError: If the path is not in the mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: dict[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, str]:
        key = check_component_path(name)
        if key not in self._mapping:
            raise TemplateNotFoundError(name, f"<memory:{key}>")
        return self._mapping[key], f"<memory:{key}>"

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())
