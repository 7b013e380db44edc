"""Result records, result sets and query descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from resultfold.core.expressions import and_join, build_range_expression

ATTACHMENT_FLAG = "IsAttachment"
CONTAINS_ATTACHMENT_FLAG = "ContainsAttachment"


@dataclass(eq=False)
class ResultRecord:
    """A single search hit.

    Records compare by identity. ``parent_result`` is a lookup-only back
    reference; folding resolves it by ``unique_id``. ``attachments`` and
    ``child_results`` are rewritten when a group is folded.
    """

    unique_id: str
    title: str = ""
    uri: Optional[str] = None
    click_uri: Optional[str] = None
    flags: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)
    parent_result: Optional["ResultRecord"] = field(default=None, repr=False)
    attachments: List["ResultRecord"] = field(default_factory=list, repr=False)
    child_results: List["ResultRecord"] = field(default_factory=list, repr=False)
    total_number_of_child_results: int = 0
    terms_to_highlight: Dict[str, Any] = field(default_factory=dict, repr=False)
    phrases_to_highlight: Dict[str, Any] = field(default_factory=dict, repr=False)
    more_results: Optional[Callable[[], List["ResultRecord"]]] = field(default=None, repr=False)

    @property
    def is_attachment(self) -> bool:
        return ATTACHMENT_FLAG in self._flag_set()

    @property
    def contains_attachment(self) -> bool:
        return CONTAINS_ATTACHMENT_FLAG in self._flag_set()

    def _flag_set(self) -> set[str]:
        return {flag.strip() for flag in self.flags.split(";") if flag.strip()}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ResultRecord":
        """Build a record from the endpoint's JSON representation."""

        unique_id = payload.get("uniqueId")
        if not unique_id:
            raise ValueError("Result payload is missing 'uniqueId'")

        record = cls(
            unique_id=str(unique_id),
            title=payload.get("title") or "",
            uri=payload.get("uri"),
            click_uri=payload.get("clickUri"),
            flags=payload.get("flags") or "",
            raw=dict(payload.get("raw") or {}),
            total_number_of_child_results=int(payload.get("totalNumberOfChildResults") or 0),
            terms_to_highlight=dict(payload.get("termsToHighlight") or {}),
            phrases_to_highlight=dict(payload.get("phrasesToHighlight") or {}),
        )

        parent_payload = payload.get("parentResult")
        if parent_payload:
            record.parent_result = cls.from_payload(parent_payload)
        record.child_results = [cls.from_payload(item) for item in payload.get("childResults") or []]
        return record

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the record and the folded tree below it."""

        return {
            "uniqueId": self.unique_id,
            "title": self.title,
            "uri": self.uri,
            "clickUri": self.click_uri,
            "flags": self.flags,
            "raw": dict(self.raw),
            "parentUniqueId": self.parent_result.unique_id if self.parent_result else None,
            "totalNumberOfChildResults": self.total_number_of_child_results,
            "termsToHighlight": self.terms_to_highlight,
            "phrasesToHighlight": self.phrases_to_highlight,
            "hasMoreResults": self.more_results is not None,
            "attachments": [attachment.to_dict() for attachment in self.attachments],
            "childResults": [child.to_dict() for child in self.child_results],
        }


@dataclass
class QueryResults:
    """A result set returned by the search endpoint for one query."""

    results: List[ResultRecord] = field(default_factory=list)
    total_count: int = 0
    search_uid: Optional[str] = None
    folded: bool = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "QueryResults":
        results = [ResultRecord.from_payload(item) for item in payload.get("results") or []]
        return cls(
            results=results,
            total_count=int(payload.get("totalCount") or len(results)),
            search_uid=payload.get("searchUid"),
        )


@dataclass(frozen=True)
class RangeConstraint:
    """Inclusive numeric window on a field."""

    field: str
    lower: float
    upper: float

    def to_expression(self) -> str:
        return build_range_expression(self.field, self.lower, self.upper)


@dataclass
class Query:
    """Query descriptor handed to the search endpoint."""

    keyword_expression: str = ""
    filter_expression: str = ""
    constant_expression: str = ""
    number_of_results: Optional[int] = None
    first_result: int = 0
    range_constraints: List[RangeConstraint] = field(default_factory=list)
    # Folding directives understood by the endpoint.
    filter_field: Optional[str] = None
    filter_field_range: Optional[int] = None
    parent_field: Optional[str] = None
    child_field: Optional[str] = None

    def copy(self) -> "Query":
        return replace(self, range_constraints=list(self.range_constraints))

    def advanced_expression(self) -> str:
        """Filter expression with every range constraint AND-joined to it."""

        return and_join(
            self.filter_expression,
            *(constraint.to_expression() for constraint in self.range_constraints),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "q": self.keyword_expression,
            "firstResult": self.first_result,
        }
        advanced = self.advanced_expression()
        if advanced:
            payload["aq"] = advanced
        if self.constant_expression:
            payload["cq"] = self.constant_expression
        if self.number_of_results is not None:
            payload["numberOfResults"] = self.number_of_results

        optional = {
            "filterField": self.filter_field,
            "filterFieldRange": self.filter_field_range,
            "parentField": self.parent_field,
            "childField": self.child_field,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


__all__ = ["Query", "QueryResults", "RangeConstraint", "ResultRecord"]
