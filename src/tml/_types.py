"""Shared data types for the tml engine.

Plain data holders passed between the parser, the engine and the asset
pipeline. The collector is the only mutable one: it is created per page
render and shared by reference across that render's component tree.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

Escape = Callable[[Any], str]
IncludeFn = Callable[[str, Mapping[str, Any], Mapping[str, Any]], str]
ComponentFn = Callable[[str, Mapping[str, Any], Mapping[str, Any], Callable[[], str]], str]
HeadFn = Callable[[Callable[[], str]], None]


@dataclass(frozen=True, slots=True)
class ParsedComponent:
    """Trimmed contents of a component's three blocks ("" when absent)."""

    template: str
    style: str = ""
    script: str = ""


@dataclass(slots=True)
class RenderCollector:
    """Per-page style/script/head contributions keyed by component path.

    Keying by path is what de-duplicates assets: rendering the same
    component twice in one page overwrites its entry instead of adding one.
    """

    styles: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    head_tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """HTML of a page render plus the collector it filled."""

    html: str
    collector: RenderCollector


@dataclass(frozen=True, slots=True)
class AssetTags:
    """Final strings ready for insertion into a document."""

    head_tag: str = ""
    css_tag: str = ""
    js_tag: str = ""


@dataclass(frozen=True, slots=True)
class RenderOutput:
    """Result of the one-shot `tml.render` call."""

    html: str
    css: str
    js: str


class CompiledRoutine(Protocol):
    """Executable form of a template.

    Called as ``routine(data, escape, include, component, context, head)``
    and returns the rendered string.
    """

    def __call__(
        self,
        data: Mapping[str, Any],
        escape: Escape,
        include: IncludeFn,
        component: ComponentFn,
        context: Mapping[str, Any],
        head: HeadFn,
    ) -> str: ...


class CodeTransformer(Protocol):
    """External capability that turns collected style/script text into final code."""

    def css(self, source: str) -> str: ...

    def js(self, source: str) -> str: ...
