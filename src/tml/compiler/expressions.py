"""Expression compilation for tml compiler.

Template expressions and inline scripts are Python source. They are parsed
with `ast.parse` and rewritten so that every free name resolves against the
per-call data scope:

    ```python
    user.name            ->  _getattr(_lookup(ctx, "user"), "name")
    total = price * qty  ->  ctx["total"] = _lookup(ctx, "price") * _lookup(ctx, "qty")
    [x.id for x in xs]   ->  [_getattr(x, "id") for x in _lookup(ctx, "xs")]
    ```

Reserved ``$`` names are translated before parsing: ``$index`` becomes the
innermost loop counter, ``$context`` the context mapping and ``$children``
the captured children string.

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

import ast
import re
from typing import TYPE_CHECKING

from tml.compiler.utils import call, const, name, scope_item
from tml.environment.exceptions import CompileError, ErrorCode
from tml.parser.interpolation import iter_code_chars
from tml.template.helpers import is_unsafe_attribute

if TYPE_CHECKING:
    from tml.compiler.core import _Block

_RESERVED_RE = re.compile(r"\$([A-Za-z_]\w*)")

_CONTEXT_LOCAL = "_context"
_CHILDREN_LOCAL = "_children"


def _arg_names(args: ast.arguments) -> set[str]:
    names = {a.arg for a in (*args.posonlyargs, *args.args, *args.kwonlyargs)}
    if args.vararg:
        names.add(args.vararg.arg)
    if args.kwarg:
        names.add(args.kwarg.arg)
    return names


def _bound_names(body: list[ast.stmt]) -> set[str]:
    """Names a function or class body binds (over-approximated)."""
    names: set[str] = set()
    for stmt in body:
        for node in ast.walk(stmt):
            if isinstance(node, ast.Name) and not isinstance(node.ctx, ast.Load):
                names.add(node.id)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                names.add(node.name)
            elif isinstance(node, ast.ExceptHandler) and node.name:
                names.add(node.name)
    return names


def _target_names(target: ast.expr) -> set[str]:
    return {n.id for n in ast.walk(target) if isinstance(n, ast.Name)}


def _strip_annotations(args: ast.arguments) -> None:
    for a in (*args.posonlyargs, *args.args, *args.kwonlyargs, args.vararg, args.kwarg):
        if a is not None:
            a.annotation = None


class ScopeRewriter(ast.NodeTransformer):
    """Rewrite free names into data-scope access.

    Names bound by lambdas, comprehensions and functions defined in inline
    scripts stay ordinary Python locals. Everything else loads through
    ``_lookup(ctx, name)`` and stores into ``ctx[name]``. Attribute loads go
    through ``_getattr``.

    Raises SyntaxError for constructs templates do not allow (imports,
    underscore and frame attributes, top-level ``return``/``yield``, assignment
    expressions on scope names); the compiler turns that into
    `CompileError`.
    """

    def __init__(self, runtime_locals: frozenset[str]):
        self._runtime_locals = runtime_locals
        self._scopes: list[set[str]] = []
        self._function_depth = 0

    def _is_local(self, var_name: str) -> bool:
        if var_name in self._runtime_locals:
            return True
        return any(var_name in scope for scope in self._scopes)

    # ── names and attributes ────────────────────────────────────────────────

    def visit_Name(self, node: ast.Name) -> ast.expr:
        if self._is_local(node.id):
            return node
        if isinstance(node.ctx, ast.Load):
            return ast.copy_location(call("_lookup", name("ctx"), const(node.id)), node)
        return ast.copy_location(scope_item(node.id, node.ctx), node)

    def visit_Attribute(self, node: ast.Attribute) -> ast.expr:
        if is_unsafe_attribute(node.attr):
            raise SyntaxError(f"access to '{node.attr}' is not allowed in templates")
        node.value = self.visit(node.value)
        if isinstance(node.ctx, ast.Load):
            return ast.copy_location(call("_getattr", node.value, const(node.attr)), node)
        return node

    def visit_MatchClass(self, node: ast.MatchClass) -> ast.pattern:
        for attr in node.kwd_attrs:
            if is_unsafe_attribute(attr):
                raise SyntaxError(f"access to '{attr}' is not allowed in templates")
        return self.generic_visit(node)  # type: ignore[return-value]

    def visit_NamedExpr(self, node: ast.NamedExpr) -> ast.expr:
        if not self._is_local(node.target.id):
            raise SyntaxError("assignment expressions are not supported outside functions")
        node.value = self.visit(node.value)
        return node

    def visit_AnnAssign(self, node: ast.AnnAssign) -> ast.stmt:
        node.target = self.visit(node.target)
        if node.value is not None:
            node.value = self.visit(node.value)
        if not isinstance(node.target, ast.Name):
            node.simple = 0
        return node

    # ── nested scopes ───────────────────────────────────────────────────────

    def _visit_defaults(self, args: ast.arguments) -> None:
        args.defaults = [self.visit(d) for d in args.defaults]
        args.kw_defaults = [self.visit(d) if d is not None else None for d in args.kw_defaults]

    def visit_Lambda(self, node: ast.Lambda) -> ast.expr:
        self._visit_defaults(node.args)
        self._scopes.append(_arg_names(node.args))
        node.body = self.visit(node.body)
        self._scopes.pop()
        return node

    def _visit_comprehension(self, node: ast.AST, fields: tuple[str, ...]) -> ast.AST:
        generators: list[ast.comprehension] = node.generators  # type: ignore[attr-defined]
        # The first iterable is evaluated in the enclosing scope
        generators[0].iter = self.visit(generators[0].iter)
        scope: set[str] = set()
        for gen in generators:
            scope |= _target_names(gen.target)
        self._scopes.append(scope)
        for i, gen in enumerate(generators):
            if i:
                gen.iter = self.visit(gen.iter)
            gen.ifs = [self.visit(test) for test in gen.ifs]
        for field in fields:
            setattr(node, field, self.visit(getattr(node, field)))
        self._scopes.pop()
        return node

    def visit_ListComp(self, node: ast.ListComp) -> ast.AST:
        return self._visit_comprehension(node, ("elt",))

    def visit_SetComp(self, node: ast.SetComp) -> ast.AST:
        return self._visit_comprehension(node, ("elt",))

    def visit_GeneratorExp(self, node: ast.GeneratorExp) -> ast.AST:
        return self._visit_comprehension(node, ("elt",))

    def visit_DictComp(self, node: ast.DictComp) -> ast.AST:
        return self._visit_comprehension(node, ("key", "value"))

    def _visit_body(self, body: list[ast.stmt]) -> list[ast.stmt]:
        result: list[ast.stmt] = []
        for stmt in body:
            visited = self.visit(stmt)
            if isinstance(visited, list):
                result.extend(visited)
            elif visited is not None:
                result.append(visited)
        return result

    def _publish(self, node: ast.stmt, def_name: str) -> ast.stmt | list[ast.stmt]:
        """Expose a top-level def/class to later template lines."""
        if self._scopes:
            return node
        publish = ast.Assign(targets=[scope_item(def_name, ast.Store())], value=name(def_name))
        return [node, ast.copy_location(publish, node)]

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.stmt | list[ast.stmt]:
        node.decorator_list = [self.visit(d) for d in node.decorator_list]
        self._visit_defaults(node.args)
        _strip_annotations(node.args)
        node.returns = None
        self._scopes.append(_arg_names(node.args) | _bound_names(node.body))
        self._function_depth += 1
        node.body = self._visit_body(node.body) or [ast.Pass()]
        self._function_depth -= 1
        self._scopes.pop()
        return self._publish(node, node.name)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> ast.stmt:
        raise SyntaxError("async functions are not supported in templates")

    def visit_ClassDef(self, node: ast.ClassDef) -> ast.stmt | list[ast.stmt]:
        node.decorator_list = [self.visit(d) for d in node.decorator_list]
        node.bases = [self.visit(b) for b in node.bases]
        node.keywords = [self.visit(k) for k in node.keywords]
        self._scopes.append(_bound_names(node.body))
        node.body = self._visit_body(node.body) or [ast.Pass()]
        self._scopes.pop()
        return self._publish(node, node.name)

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> ast.ExceptHandler:
        if node.type is not None:
            node.type = self.visit(node.type)
        node.body = self._visit_body(node.body)
        if node.name and not self._is_local(node.name):
            bind = ast.Assign(targets=[scope_item(node.name, ast.Store())], value=name(node.name))
            node.body.insert(0, ast.copy_location(bind, node))
        return node

    # ── forbidden at template level ─────────────────────────────────────────

    def visit_Import(self, node: ast.AST) -> ast.AST:
        raise SyntaxError("import statements are not allowed in templates")

    visit_ImportFrom = visit_Import

    def _outside_function(self, keyword: str) -> None:
        if not self._function_depth:
            raise SyntaxError(f"'{keyword}' outside function")

    def visit_Return(self, node: ast.Return) -> ast.stmt:
        self._outside_function("return")
        return self.generic_visit(node)  # type: ignore[return-value]

    def visit_Yield(self, node: ast.Yield) -> ast.expr:
        self._outside_function("yield")
        return self.generic_visit(node)  # type: ignore[return-value]

    def visit_YieldFrom(self, node: ast.YieldFrom) -> ast.expr:
        self._outside_function("yield")
        return self.generic_visit(node)  # type: ignore[return-value]

    def visit_Await(self, node: ast.Await) -> ast.expr:
        raise SyntaxError("'await' is not supported in templates")


class ExpressionCompilationMixin:
    """Mixin for compiling template expressions and inline scripts.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _path: str
        _source: str | None
        _lineno: int
        _blocks: list[_Block]

    def _runtime_locals(self) -> frozenset[str]:
        """Names the generated code binds as real locals at this point."""
        index_vars = {b.index_var for b in self._blocks if b.index_var}
        return frozenset({_CONTEXT_LOCAL, _CHILDREN_LOCAL, *index_vars})

    def _reserved_name(self, reserved: str) -> str:
        if reserved == "index":
            for block in reversed(self._blocks):
                if block.index_var:
                    return block.index_var
            raise CompileError(
                "$index used outside of @each",
                self._path,
                self._lineno,
                code=ErrorCode.INVALID_EXPRESSION,
                source=self._source,
            )
        if reserved == "context":
            return _CONTEXT_LOCAL
        if reserved == "children":
            return _CHILDREN_LOCAL
        raise CompileError(
            f"Unknown reserved name ${reserved}",
            self._path,
            self._lineno,
            code=ErrorCode.INVALID_EXPRESSION,
            source=self._source,
        )

    def _translate_reserved(self, text: str) -> str:
        """Replace ``$name`` tokens outside string literals."""
        pieces: list[str] = []
        last = 0
        for i, ch in iter_code_chars(text):
            if ch != "$" or i < last:
                continue
            match = _RESERVED_RE.match(text, i)
            if match is None:
                continue
            pieces.append(text[last:i])
            pieces.append(self._reserved_name(match.group(1)))
            last = match.end()
        pieces.append(text[last:])
        return "".join(pieces)

    def _expression_error(self, err: SyntaxError, text: str) -> CompileError:
        return CompileError(
            f"Compilation failed: {err.msg} (line {self._lineno}: {text.strip()})",
            self._path,
            0,
            code=ErrorCode.INVALID_EXPRESSION,
            source=self._source,
        )

    def _parse(self, text: str, mode: str, first_line: int) -> ast.AST:
        source = self._translate_reserved(text)
        try:
            tree = ast.parse(source, mode=mode)
            ast.increment_lineno(tree, first_line - 1)
            rewriter = ScopeRewriter(self._runtime_locals())
            return rewriter.visit(tree)
        except SyntaxError as e:
            raise self._expression_error(e, text) from None

    def _compile_expr(self, text: str) -> ast.expr:
        """Compile one template expression to a Python AST expression."""
        tree = self._parse(text.strip(), "eval", self._lineno)
        return tree.body  # type: ignore[attr-defined]

    def _compile_statements(self, text: str, first_line: int) -> list[ast.stmt]:
        """Compile inline-script source to Python AST statements."""
        tree = self._parse(text, "exec", first_line)
        return list(tree.body)  # type: ignore[attr-defined]
