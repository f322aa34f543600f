"""Context lookup, template interpolation and the condition expression language.

Every step type resolves values through these helpers. Lookups never raise.
Paths walk mappings by key and lists by decimal index. A path that does not
resolve is distinct from one that resolves to JSON ``null``: the former
renders as an empty string, the latter as ``null``.

An expression is either a single binary comparison ``<path> <op> <literal>``
or a bare path whose truthiness is tested. Supported operators are
``=== !== == != >= <= > <``; boolean combinators, parentheses and negation
are not supported.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Mapping, Sequence

_TEMPLATE_RE = re.compile(r"\{\{([^}]+)\}\}")
_INDEX_RE = re.compile(r"0|[1-9][0-9]*")

# Longer operators first so ``==`` never matches inside ``===``.
OPERATORS = ("===", "!==", "==", "!=", ">=", "<=", ">", "<")

# Result of a lookup whose path does not exist.
_MISSING = object()


def _resolve(data: Any, path: str) -> Any:
    current = data
    for key in path.split("."):
        if isinstance(current, Mapping):
            if key not in current:
                return _MISSING
            current = current[key]
        elif (
            isinstance(current, Sequence)
            and not isinstance(current, (str, bytes))
            and _INDEX_RE.fullmatch(key)
            and int(key) < len(current)
        ):
            current = current[int(key)]
        else:
            return _MISSING
    return current


def get_nested_value(data: Any, path: str) -> Any:
    """Return the value at dot-separated ``path`` inside ``data``.

    List elements are addressed by index, e.g. ``items.0.name``. Returns
    ``None`` when a segment is missing, an index is out of range, or the
    current value is neither a mapping nor a list.
    """
    value = _resolve(data, path)
    return None if value is _MISSING else value


def to_display_string(value: Any) -> str:
    """Render ``value`` the way templates and equality checks see it."""
    if value is _MISSING:
        return ""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def interpolate_string(template: str, context: Mapping[str, Any]) -> str:
    """Replace every ``{{ path }}`` marker in ``template`` with its context value."""

    def _replace(match: re.Match) -> str:
        return to_display_string(_resolve(context, match.group(1).strip()))

    return _TEMPLATE_RE.sub(_replace, template)


def interpolate_value(value: Any, context: Mapping[str, Any]) -> Any:
    """Interpolate markers inside string fields of a JSON-compatible structure.

    The structure is serialized, interpolated and parsed back, so markers that
    span JSON structural characters are not supported.
    """
    return json.loads(interpolate_string(json.dumps(value), context))


def _strip_quotes(literal: str) -> str:
    if literal[:1] in ("'", '"'):
        literal = literal[1:]
    if literal[-1:] in ("'", '"'):
        literal = literal[:-1]
    return literal


def _to_number(value: Any) -> float:
    if value is _MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return math.nan


def evaluate_expression(expression: str, context: Mapping[str, Any]) -> bool:
    """Evaluate a condition expression against ``context``.

    >>> evaluate_expression("count > 3", {"count": 5})
    True
    """
    for op in OPERATORS:
        if op not in expression:
            continue
        left_path, _, right = expression.partition(op)
        left_value = _resolve(context, left_path.strip())
        literal = _strip_quotes(right.strip())

        if op in ("===", "=="):
            return to_display_string(left_value) == literal
        if op in ("!==", "!="):
            return to_display_string(left_value) != literal

        left_num, right_num = _to_number(left_value), _to_number(literal)
        if op == ">=":
            return left_num >= right_num
        if op == "<=":
            return left_num <= right_num
        if op == ">":
            return left_num > right_num
        return left_num < right_num

    return bool(get_nested_value(context, expression.strip()))
