"""Core data model and query helpers."""

from .fields import find_field_value, get_field_value, normalize_field_name
from .models import Query, QueryResults, RangeConstraint, ResultRecord

__all__ = [
    "Query",
    "QueryResults",
    "RangeConstraint",
    "ResultRecord",
    "find_field_value",
    "get_field_value",
    "normalize_field_name",
]
