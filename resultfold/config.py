"""Folding configuration."""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from resultfold.core.expressions import to_field_expression

_SORT_DIRECTIONS = {"ascending": False, "descending": True}


class FoldingConfig(BaseSettings):  # type: ignore[misc]
    """Options controlling how result groups are folded and expanded."""

    field: str = Field(..., description="Field whose value identifies a folded group, e.g. @foldingcollection")
    child_field: Optional[str] = Field(None, description="Field identifying a result as a child")
    parent_field: Optional[str] = Field(None, description="Field identifying a result as a parent")
    range: int = Field(2, ge=1, description="Number of related results requested per group")
    range_field: Optional[str] = Field(
        None, description="Numeric field constraining the expansion query to a window"
    )
    range_width: float = Field(2, ge=0, description="Half-width of the expansion window")
    rearrange: Optional[str] = Field(
        None, description="Sort criteria applied to child results, e.g. '@date descending'"
    )
    enable_expand: bool = Field(True, description="Expose a 'more results' capability")
    expand_expression: Optional[str] = Field(
        None, description="Expression OR-combined with the keywords of the expansion query"
    )
    maximum_expanded_results: Optional[int] = Field(
        None, ge=1, description="Number of results requested by the expansion query"
    )

    model_config = SettingsConfigDict(env_prefix="FOLDING_", env_file=".env", extra="ignore")

    @field_validator("field", mode="before")
    @classmethod
    def validate_field(cls, value: object) -> str:
        if value is None or not str(value).strip():
            raise ValueError("field must name the folding field")
        return to_field_expression(str(value))

    @field_validator("child_field", "parent_field", "range_field", mode="before")
    @classmethod
    def normalize_optional_field(cls, value: object) -> Optional[str]:
        if value is None or not str(value).strip():
            return None
        return to_field_expression(str(value))

    @field_validator("rearrange")
    @classmethod
    def validate_rearrange(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        parts = value.split()
        if len(parts) > 2 or (len(parts) == 2 and parts[1].lower() not in _SORT_DIRECTIONS):
            raise ValueError("rearrange must look like '<field> [ascending|descending]'")
        return " ".join(parts)

    @property
    def sort_criteria(self) -> Optional[Tuple[str, bool]]:
        """Return ``(field, descending)`` parsed from ``rearrange``."""

        if self.rearrange is None:
            return None
        parts = self.rearrange.split()
        descending = len(parts) == 2 and _SORT_DIRECTIONS[parts[1].lower()]
        return parts[0], descending
