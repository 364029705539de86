"""Statement compilation for tml compiler.

Provides mixins for compiling template lines to Python AST statements.

The statements package is organized into logical modules:
- basic: Output lines, @include, @children, @provide
- control_flow: @if/@elseif/@else and @each
- components: Children-capturing blocks (@component, @head)
- inline_script: <% ... %> spans

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

from tml.compiler.statements.basic import BasicStatementMixin
from tml.compiler.statements.components import ComponentBlockMixin
from tml.compiler.statements.control_flow import ControlFlowMixin
from tml.compiler.statements.inline_script import InlineScriptMixin, ScriptBuffer


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    ComponentBlockMixin,
    InlineScriptMixin,
):
    """Combined mixin for compiling all statement types.

    This class combines all statement compilation mixins into a single
    interface that can be inherited by the Compiler class.

    """


__all__ = ["ScriptBuffer", "StatementCompilationMixin"]
