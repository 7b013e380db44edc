"""Typed access to the raw field payload of a result."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from resultfold.exceptions import FieldNotFoundError

if TYPE_CHECKING:
    from resultfold.core.models import ResultRecord


def normalize_field_name(field: str) -> str:
    """Strip the ``@`` prefix used in query expressions (``@author`` -> ``author``)."""

    return field.strip().lstrip("@")


def find_field_value(record: "ResultRecord", field: str) -> Optional[Any]:
    """Return the raw value of ``field`` on ``record`` or ``None`` when absent.

    Lookup is exact first, then case-insensitive on the lowercase key since
    index field names are usually stored lowercase.
    """

    name = normalize_field_name(field)
    if not name:
        return None
    value = record.raw.get(name)
    if value is None:
        value = record.raw.get(name.lower())
    return value


def get_field_value(record: "ResultRecord", field: str) -> Any:
    """Return the raw value of ``field`` on ``record``.

    Raises:
        FieldNotFoundError: if the record carries no value for the field.
    """

    value = find_field_value(record, field)
    if value is None:
        raise FieldNotFoundError(field, unique_id=record.unique_id)
    return value


__all__ = ["find_field_value", "get_field_value", "normalize_field_name"]
