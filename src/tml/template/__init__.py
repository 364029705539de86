"""Compiled template objects and their runtime helpers."""

from tml.template.core import Template
from tml.template.helpers import STATIC_NAMESPACE, SAFE_BUILTINS, lookup, safe_getattr, str_safe

__all__ = ["SAFE_BUILTINS", "STATIC_NAMESPACE", "Template", "lookup", "safe_getattr", "str_safe"]
