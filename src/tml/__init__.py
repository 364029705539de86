"""tml: server-side component templates compiled to Python.

A component is one ``.tml`` file holding a ``<template>`` block plus an
optional ``<style>`` and ``<script>`` block. Templates use line directives
(``@if``, ``@each``, ``@include``, ``@component``, ``@children``,
``@provide``, ``@head``), ``{{ escaped }}`` / ``{{{ raw }}}`` output and
``<% ... %>`` inline Python.

Quickstart:
    >>> from tml import render
    >>> out = render("views/", "pages/home", {"title": "Hello"})
    >>> out.html, out.css, out.js

Engine API:
    >>> from tml import Engine, EngineConfig, AssetBuilder, inject_assets
    >>> engine = Engine(EngineConfig(views_dir="views/", cache=True))
    >>> result = engine.render_page("pages/home", {"title": "Hello"})
    >>> html = inject_assets(result.html, AssetBuilder().build(result.collector))

Architecture:
Component Source → Parser → template text → Compiler → Python AST → exec()

Pipeline stages:
1. **Parser**: Splits a component into template/style/script blocks
2. **Compiler**: Turns template lines into a Python ``render`` function
3. **Template**: Runs the compiled routine, normalizing errors
4. **Engine**: Resolves components recursively and collects assets

Expressions are Python. Every data key is addressable as a bare name,
``a.b`` falls back between attribute and key access, and missing members
render as empty output.

"""

from tml._types import (
    AssetTags,
    CodeTransformer,
    CompiledRoutine,
    ParsedComponent,
    RenderCollector,
    RenderOutput,
    RenderResult,
)
from tml.assets import AssetBuilder, build_assets, build_inline_assets, inject_assets
from tml.compiler import Compiler, compile_template
from tml.engine import Engine
from tml.environment import (
    CompileError,
    DictLoader,
    EngineConfig,
    ErrorCode,
    FileSystemLoader,
    PathTraversalError,
    RenderError,
    TemplateError,
    TemplateNotFoundError,
)
from tml.minify import MinifyTransformer, minify_css, minify_js, wrap_in_iife
from tml.parser import parse
from tml.render import render
from tml.template import Template
from tml.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "AssetBuilder",
    "AssetTags",
    "CodeTransformer",
    "CompileError",
    "CompiledRoutine",
    "Compiler",
    "DictLoader",
    "Engine",
    "EngineConfig",
    "ErrorCode",
    "FileSystemLoader",
    "MinifyTransformer",
    "ParsedComponent",
    "PathTraversalError",
    "RenderCollector",
    "RenderError",
    "RenderOutput",
    "RenderResult",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "__version__",
    "build_assets",
    "build_inline_assets",
    "compile_template",
    "html_escape",
    "inject_assets",
    "minify_css",
    "minify_js",
    "parse",
    "render",
    "wrap_in_iife",
]
