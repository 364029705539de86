"""Directive compiler: template text → Python code object → `Template`."""

from tml.compiler.core import Compiler, compile_template
from tml.compiler.expressions import ScopeRewriter

__all__ = ["Compiler", "ScopeRewriter", "compile_template"]
