"""Helpers for building search query expressions."""

from __future__ import annotations

import re
from typing import Any, Sequence

_ATOMIC_VALUE = re.compile(r"^(?:\w+|-?\d+(?:\.\d+)?)$")


def to_field_expression(field: str) -> str:
    """Return ``field`` prefixed with ``@`` as expected by query expressions."""

    field = field.strip()
    return field if field.startswith("@") else f"@{field}"


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def quote_if_needed(value: Any) -> str:
    """Quote ``value`` unless it is a single atomic token.

    Words and numbers are emitted as-is so that ``@field=value`` stays
    readable. Anything else, including values with ``-`` or ``.`` that the
    query syntax could read as operators, is wrapped in double quotes with
    embedded quotes escaped.
    """

    text = format_value(value)
    if _ATOMIC_VALUE.fullmatch(text):
        return text
    escaped = text.replace('"', '\\"')
    return f'"{escaped}"'


def build_field_expression(field: str, operator: str, values: Sequence[Any]) -> str:
    if not values:
        raise ValueError("A field expression requires at least one value")

    prefix = f"{to_field_expression(field)}{operator}"
    if len(values) == 1:
        return prefix + quote_if_needed(values[0])
    return prefix + "(" + ",".join(quote_if_needed(value) for value in values) + ")"


def build_range_expression(field: str, lower: Any, upper: Any) -> str:
    """Return an inclusive range expression such as ``@field=3..7``."""

    return f"{to_field_expression(field)}={format_value(lower)}..{format_value(upper)}"


def or_combine(keywords: str | None, expression: str | None) -> str:
    """OR-combine free-text keywords with an expression.

    Keywords are grouped in parentheses so their own operators keep their
    precedence. Blank sides are dropped.
    """

    keywords = (keywords or "").strip()
    expression = (expression or "").strip()
    if not keywords:
        return expression
    if not expression:
        return keywords
    return f"({keywords}) OR {expression}"


def and_join(*parts: str | None) -> str:
    """Join expressions with the implicit AND operator (a space)."""

    return " ".join(part.strip() for part in parts if part and part.strip())


__all__ = [
    "and_join",
    "build_field_expression",
    "build_range_expression",
    "format_value",
    "or_combine",
    "quote_if_needed",
    "to_field_expression",
]
