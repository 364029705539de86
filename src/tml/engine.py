"""tml Engine: component tree renderer.

The Engine resolves component paths to compiled templates and renders them
recursively. Every call into a child component (``@include``,
``@component``) re-enters `Engine.render_component` with the same
collector, so one page render gathers the style, script and head
contributions of its whole tree.

Caches:
- Parsed components: always cached, keyed by component path
- Compiled templates: cached only when ``cache=True``; otherwise every
  render recompiles from the parsed source. `Engine.clear_cache` drops
  both caches so edited sources are read again
- CSS/JS registries: style/script text of every component seen so far

Thread-Safety:
Caches are plain dicts written with single assignments; re-deriving an
entry and overwriting it with an equivalent value is harmless. The render
collector and depth counter are per page render and never shared.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

from tml._types import ParsedComponent, RenderCollector, RenderResult
from tml.assets import build_inline_assets, inject_assets
from tml.compiler import compile_template
from tml.environment.config import DEFAULT_MAX_DEPTH, EngineConfig
from tml.environment.loaders import FileSystemLoader, check_component_path
from tml.parser import parse
from tml.render_state import get_render_state, render_state
from tml.utils.html import html_escape

if TYPE_CHECKING:
    from tml.template import Template

logger = logging.getLogger(__name__)


class Loader(Protocol):
    """Anything that can serve component sources by path."""

    def get_source(self, name: str) -> tuple[str, str]: ...

    def list_templates(self) -> list[str]: ...


class Engine:
    """Render trees of tml components.

    Attributes:
        loader: Source of component text
        cache: Whether compiled templates are reused across renders
        max_depth: Recursion ceiling for component resolution

    Example:
            >>> engine = Engine(EngineConfig(views_dir="views/", cache=True))
            >>> result = engine.render_page("pages/home", {"title": "Home"})
            >>> result.html
            '<html>...'
            >>> sorted(result.collector.styles)
            ['components/card', 'pages/home']

    Raises:
        FileNotFoundError: If the configured views directory does not exist

    """

    __slots__ = (
        "_compiled",
        "_css",
        "_js",
        "_parsed",
        "cache",
        "loader",
        "max_depth",
    )

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        loader: Loader | None = None,
        cache: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        if config is not None:
            loader = FileSystemLoader(
                config.views_dir,
                extension=config.extension,
                encoding=config.encoding,
            )
            cache = config.cache
            max_depth = config.max_depth
        if loader is None:
            raise ValueError("Engine requires an EngineConfig or a loader")

        self.loader = loader
        self.cache = cache
        self.max_depth = max_depth
        self._parsed: dict[str, ParsedComponent] = {}
        self._compiled: dict[str, Template] = {}
        self._css: dict[str, str] = {}
        self._js: dict[str, str] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # Registries
    # ─────────────────────────────────────────────────────────────────────────

    def preload(self) -> int:
        """Parse every component the loader knows about.

        Fills the parsed cache and the CSS/JS registries, and compiles
        everything up front when caching is enabled.

        Returns:
            Number of components loaded
        """
        names = self.loader.list_templates()
        for path in names:
            parsed = self._load(path)
            if self.cache:
                self._compiled[path] = compile_template(parsed.template, path)
        logger.debug("Preloaded %d components (cache=%s)", len(names), self.cache)
        return len(names)

    def get_css(self, path: str) -> str | None:
        return self._css.get(path)

    def get_js(self, path: str) -> str | None:
        return self._js.get(path)

    def get_all_css(self) -> dict[str, str]:
        return dict(self._css)

    def get_all_js(self) -> dict[str, str]:
        return dict(self._js)

    def clear_cache(self) -> None:
        """Drop parsed and compiled components; registries are kept."""
        self._parsed = {}
        self._compiled = {}

    # ─────────────────────────────────────────────────────────────────────────
    # Resolution
    # ─────────────────────────────────────────────────────────────────────────

    def _load(self, path: str) -> ParsedComponent:
        source, location = self.loader.get_source(path)
        parsed = parse(source)
        logger.debug("Parsed %s from %s", path, location)
        self._parsed[path] = parsed
        if parsed.style:
            self._css[path] = parsed.style
        if parsed.script:
            self._js[path] = parsed.script
        return parsed

    def get_parsed(self, path: str) -> ParsedComponent:
        """Parsed component for *path*, loading it on a cache miss.

        Raises:
            PathTraversalError: If the path escapes the views directory
            TemplateNotFoundError: If nothing backs the path
        """
        path = check_component_path(path)
        parsed = self._parsed.get(path)
        if parsed is None:
            parsed = self._load(path)
        return parsed

    def get_template(self, path: str) -> Template:
        """Compiled template for *path*; reused only when caching is on."""
        path = check_component_path(path)
        if self.cache:
            cached = self._compiled.get(path)
            if cached is not None:
                return cached

        template = compile_template(self.get_parsed(path).template, path)
        if self.cache:
            self._compiled[path] = template
        return template

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def render_page(
        self,
        path: str,
        data: Mapping[str, Any] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> RenderResult:
        """Render a top-level component with a fresh collector and depth counter."""
        collector = RenderCollector()
        with render_state(self.max_depth):
            html = self.render_component(path, data or {}, context or {}, collector)
        return RenderResult(html=html, collector=collector)

    def render_document(
        self,
        path: str,
        data: Mapping[str, Any] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a page and inject its collected assets inline, untransformed."""
        result = self.render_page(path, data, context)
        return inject_assets(result.html, build_inline_assets(result.collector))

    def render_component(
        self,
        path: str,
        data: Mapping[str, Any],
        context: Mapping[str, Any],
        collector: RenderCollector,
        children: str | None = None,
    ) -> str:
        """Render one component and, through its callbacks, its subtree.

        Raises:
            RenderError: On runtime failures, including the depth guard
            CompileError: If the component's template is malformed
        """
        state = get_render_state()
        if state is None:
            with render_state(self.max_depth):
                return self.render_component(path, data, context, collector, children)

        with state.enter(path):
            path = check_component_path(path)
            template = self.get_template(path)

            parsed = self.get_parsed(path)
            if parsed.style:
                collector.styles[path] = parsed.style
            if parsed.script:
                collector.scripts[path] = parsed.script

            def _include(
                include_path: str,
                include_data: Mapping[str, Any],
                include_context: Mapping[str, Any],
            ) -> str:
                return self.render_component(include_path, include_data, include_context, collector)

            def _component(
                component_path: str,
                component_data: Mapping[str, Any],
                component_context: Mapping[str, Any],
                children_fn: Callable[[], str],
            ) -> str:
                children_html = children_fn()
                return self.render_component(
                    component_path,
                    component_data,
                    component_context,
                    collector,
                    children_html,
                )

            def _head(fn: Callable[[], str]) -> None:
                result = fn()
                if result:
                    collector.head_tags[path] = result

            return template.render(
                data,
                escape=html_escape,
                include=_include,
                component=_component,
                context=context,
                head=_head,
                children=children,
            )
