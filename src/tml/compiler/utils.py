"""Small constructors for the Python AST nodes the compiler emits."""

from __future__ import annotations

import ast
from typing import Any


def name(id: str, *, store: bool = False) -> ast.Name:
    return ast.Name(id=id, ctx=ast.Store() if store else ast.Load())


def const(value: Any) -> ast.Constant:
    return ast.Constant(value=value)


def call(func: str | ast.expr, *args: ast.expr) -> ast.Call:
    """``func(*args)`` where a string *func* is a namespace name."""
    target = name(func) if isinstance(func, str) else func
    return ast.Call(func=target, args=list(args), keywords=[])


def assign(target: str | ast.expr, value: ast.expr) -> ast.Assign:
    node = name(target, store=True) if isinstance(target, str) else target
    return ast.Assign(targets=[node], value=value)


def scope_item(key: str, ctx: ast.expr_context | None = None) -> ast.Subscript:
    """``ctx["key"]``: a slot in the per-call data scope."""
    return ast.Subscript(value=name("ctx"), slice=const(key), ctx=ctx or ast.Load())


def append(value: ast.expr) -> ast.Expr:
    """``_append(value)``: StringBuilder output."""
    return ast.Expr(value=call("_append", value))


def joined() -> ast.Return:
    """``return "".join(buf)``"""
    return ast.Return(
        value=ast.Call(
            func=ast.Attribute(value=const(""), attr="join", ctx=ast.Load()),
            args=[name("buf")],
            keywords=[],
        )
    )


def buffer_preamble() -> list[ast.stmt]:
    """``buf = []`` and ``_append = buf.append``."""
    return [
        assign("buf", ast.List(elts=[], ctx=ast.Load())),
        assign("_append", ast.Attribute(value=name("buf"), attr="append", ctx=ast.Load())),
    ]


def function_def(
    fn_name: str,
    params: list[str],
    body: list[ast.stmt],
    defaults: list[ast.expr] | None = None,
) -> ast.FunctionDef:
    """Plain ``def fn_name(params): body`` with optional trailing defaults."""
    fields: dict[str, Any] = {
        "name": fn_name,
        "args": ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg=p) for p in params],
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=defaults or [],
        ),
        "body": body,
        "decorator_list": [],
        "returns": None,
    }
    # Python 3.12+ requires type_params on FunctionDef
    if "type_params" in ast.FunctionDef._fields:
        fields["type_params"] = []
    return ast.FunctionDef(**fields)


def at_line(node: ast.stmt, lineno: int) -> ast.stmt:
    """Pin a generated statement to its template line.

    Children without a location inherit it through
    ``ast.fix_missing_locations`` at module build time.
    """
    node.lineno = node.end_lineno = lineno
    node.col_offset = node.end_col_offset = 0
    return node
