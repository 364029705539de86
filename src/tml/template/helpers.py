"""Pure runtime helper functions injected into the template namespace.

These functions are called by compiled template code at render time.
None of them close over Engine state; they use only their parameters.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Mapping
from typing import Any

# =============================================================================
# Builtins visible to template expressions and inline scripts
# =============================================================================
# Compiled templates run with this table as ``__builtins__`` and bare names
# fall back to it after the data scope, so ``len(items)`` works while
# ``open``, ``eval``, ``exec`` and ``__import__`` stay unreachable.
# =============================================================================

SAFE_BUILTINS: dict[str, Any] = {
    name: getattr(builtins, name)
    for name in (
        "abs",
        "all",
        "any",
        "bool",
        "callable",
        "chr",
        "dict",
        "divmod",
        "enumerate",
        "filter",
        "float",
        "format",
        "frozenset",
        "int",
        "isinstance",
        "len",
        "list",
        "map",
        "max",
        "min",
        "next",
        "ord",
        "pow",
        "range",
        "repr",
        "reversed",
        "round",
        "set",
        "slice",
        "sorted",
        "str",
        "sum",
        "tuple",
        "zip",
        # Exceptions usable in inline-script try/except
        "Exception",
        "IndexError",
        "KeyError",
        "TypeError",
        "ValueError",
        "ZeroDivisionError",
        # Required by class statements inside inline scripts
        "__build_class__",
    )
}


# Attributes that lead from a generator, coroutine, function or exception
# back to interpreter frames, and from there to the real builtins.
UNSAFE_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "gi_frame",
        "gi_code",
        "cr_frame",
        "cr_code",
        "ag_frame",
        "ag_code",
        "f_back",
        "f_globals",
        "f_locals",
        "f_builtins",
        "f_code",
        "tb_frame",
        "tb_next",
    }
)

# str methods that walk attributes of their arguments ("{0.gi_frame}")
UNSAFE_STR_METHODS: frozenset[str] = frozenset({"format", "format_map"})


def is_unsafe_attribute(name: str) -> bool:
    """Whether templates may never name *name* as an attribute."""
    return name.startswith("_") or name in UNSAFE_ATTRIBUTES


def check_attribute(obj: Any, name: str) -> None:
    """Refuse attribute access that could reach interpreter internals.

    Raises:
        AttributeError: If *name* is unsafe on *obj*
    """
    if is_unsafe_attribute(name):
        raise AttributeError(f"access to '{name}' is not allowed in templates")
    if name in UNSAFE_STR_METHODS and (
        isinstance(obj, str) or (isinstance(obj, type) and issubclass(obj, str))
    ):
        raise AttributeError(f"access to str.{name} is not allowed in templates")


def lookup(ctx: dict[str, Any], var_name: str) -> Any:
    """Resolve a bare template name: data scope first, then safe builtins.

    Raises:
        NameError: With a "Did you mean" hint when a close match exists
    """
    try:
        return ctx[var_name]
    except KeyError:
        pass
    try:
        return SAFE_BUILTINS[var_name]
    except KeyError:
        from difflib import get_close_matches

        msg = f"name '{var_name}' is not defined"
        available = [k for k in ctx if isinstance(k, str)]
        matches = get_close_matches(var_name, available, n=1, cutoff=0.6)
        if matches:
            msg += f". Did you mean '{matches[0]}'?"
        raise NameError(msg, name=var_name) from None


def safe_getattr(obj: Any, name: str) -> Any:
    """Get attribute with mapping fallback and None-safe handling.

    Resolution order:
    - Mappings: subscript first (user data), getattr fallback (methods).
      This keeps keys like ``items`` or ``title`` resolving to user data
      instead of the dict method of the same name.
    - Objects: getattr first, subscript fallback.

    A missing member, or any member of ``None``, yields ``None``. Names
    starting with ``_``, frame/code attributes and ``str.format`` raise
    `AttributeError` (see `check_attribute`).
    """
    check_attribute(obj, name)
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        try:
            return obj[name]
        except KeyError:
            return getattr(obj, name, None)
    try:
        return getattr(obj, name)
    except AttributeError:
        try:
            return obj[name]
        except (KeyError, TypeError, IndexError):
            return None


def str_safe(value: Any) -> str:
    """Convert value to string, treating None as empty string.

    Used for raw ``{{{ }}}`` output so that missing values produce empty
    output rather than the literal string 'None'.
    """
    if value is None:
        return ""
    return str(value)


def split_scope(data: Mapping[str, Any]) -> tuple[dict[str, Any], str]:
    """Copy *data* into a fresh scope dict and pull out injected children.

    Returns ``(ctx, children)``; *children* is ``""`` when none was passed.
    """
    ctx = dict(data)
    children = ctx.pop("$children", None)
    return ctx, str_safe(children)


def merge_props(data: Mapping[str, Any], props: Any) -> dict[str, Any]:
    """Shallow-merge *props* over *data*; props win on key conflict.

    Raises:
        TypeError: If props is neither None nor a mapping
    """
    if props is None:
        return dict(data)
    if not isinstance(props, Mapping):
        raise TypeError(f"props must be a mapping, got {type(props).__name__}")
    return {**data, **props}


def iterate(source: Iterable[Any] | None) -> list[Any]:
    """Materialize an ``@each`` source; None iterates nothing."""
    return list(source) if source is not None else []


def shadow(ctx: dict[str, Any], names: tuple[str, ...]) -> tuple[tuple[str, ...], dict[str, Any]]:
    """Snapshot *names* in *ctx* before a loop binds them."""
    return names, {name: ctx[name] for name in names if name in ctx}


def unshadow(ctx: dict[str, Any], saved: tuple[tuple[str, ...], dict[str, Any]]) -> None:
    """Restore names snapshotted by `shadow`, dropping ones that were unbound."""
    names, previous = saved
    for name in names:
        if name in previous:
            ctx[name] = previous[name]
        else:
            ctx.pop(name, None)


# =============================================================================
# Shared Base Namespace
# =============================================================================
# Static entries shared across all Template instances. Copied once per
# Template.__init__ instead of constructed fresh each time.
#
# Thread-Safety: This dict is read-only after module load.
# =============================================================================

STATIC_NAMESPACE: dict[str, Any] = {
    "__builtins__": SAFE_BUILTINS,
    "__name__": "tml.template",
    "_lookup": lookup,
    "_getattr": safe_getattr,
    "_str": str_safe,
    "_scope": split_scope,
    "_merge": merge_props,
    "_iterate": iterate,
    "_shadow": shadow,
    "_unshadow": unshadow,
}
