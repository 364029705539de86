"""Configuration, loaders and exceptions for the tml engine."""

from tml.environment.config import DEFAULT_MAX_DEPTH, EngineConfig
from tml.environment.exceptions import (
    CompileError,
    ErrorCode,
    PathTraversalError,
    RenderError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    build_source_snippet,
)
from tml.environment.loaders import (
    DEFAULT_EXTENSION,
    DictLoader,
    FileSystemLoader,
    check_component_path,
    safe_path,
)

__all__ = [
    "DEFAULT_EXTENSION",
    "DEFAULT_MAX_DEPTH",
    "CompileError",
    "DictLoader",
    "EngineConfig",
    "ErrorCode",
    "FileSystemLoader",
    "PathTraversalError",
    "RenderError",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "build_source_snippet",
    "check_component_path",
    "safe_path",
]
