from __future__ import annotations

import logging
from functools import partial
from typing import Any, List, Optional, Protocol, Tuple

from pydantic import ValidationError

from resultfold.config import FoldingConfig
from resultfold.core.expressions import build_field_expression, or_combine
from resultfold.core.fields import find_field_value, get_field_value
from resultfold.core.models import Query, QueryResults, RangeConstraint, ResultRecord
from resultfold.exceptions import ConfigError, FoldingError
from resultfold.folding.builder import GetResult, build_forest, flatten_forest, fold_result

logger = logging.getLogger(__name__)

DEFAULT_EXPAND_EXPRESSION = "@uri"


class SearchEndpoint(Protocol):
    def search(self, query: Query) -> QueryResults: ...


class FoldingService:
    """Fold query responses and expand folded groups on demand.

    Each top result of a response is folded into attachments and child
    results. When the index reports more related results than were returned,
    the top result gets a zero-argument ``more_results`` callable that runs a
    second query restricted to the group's folding-field value and folds the
    fetched results into the same group.

    ``more_results`` is not guarded against concurrent or repeated calls;
    every call performs a new round trip.
    """

    def __init__(
        self,
        config: Optional[FoldingConfig] = None,
        *,
        endpoint: Optional[SearchEndpoint] = None,
        get_result: Optional[GetResult] = None,
        **options: Any,
    ) -> None:
        if config is None:
            try:
                config = FoldingConfig(**options)
            except ValidationError as exc:
                raise ConfigError(f"Invalid folding configuration: {exc}") from exc
        elif options:
            raise ConfigError("Pass either a FoldingConfig or keyword options, not both")

        self.config = config
        self.endpoint = endpoint
        self.get_result = get_result or fold_result

    def prepare_query(self, query: Query) -> Query:
        """Ask the endpoint to return related results along with each top result."""

        query.filter_field = self.config.field
        query.filter_field_range = self.config.range
        if self.config.parent_field:
            query.parent_field = self.config.parent_field
        if self.config.child_field:
            query.child_field = self.config.child_field
        return query

    def process_results(self, results: QueryResults, query: Query) -> QueryResults:
        """Fold every top result of ``results`` and attach expansion callables."""

        if results.folded:
            raise FoldingError("Query results have already been folded")

        folded = [self.get_result(result) for result in results.results]
        for top in folded:
            self._rearrange(top)
            self._attach_more_results(top, query)
        results.results = folded
        results.folded = True
        return results

    def is_expandable(self, top: ResultRecord) -> bool:
        if not self.config.enable_expand or self.endpoint is None:
            return False
        if find_field_value(top, self.config.field) is None:
            logger.debug(
                "Result %s has no value for %s; expansion disabled", top.unique_id, self.config.field
            )
            return False
        return top.total_number_of_child_results > len(flatten_forest(top))

    def build_expand_query(self, top: ResultRecord, query: Query) -> Query:
        """Derive the expansion query for ``top`` from the base ``query``."""

        expand_query = query.copy()
        field_value = get_field_value(top, self.config.field)
        expand_query.filter_expression = build_field_expression(self.config.field, "=", [field_value])
        # The keywords keep highlighting intact; the expression keeps every group member matchable.
        expand_query.keyword_expression = or_combine(
            query.keyword_expression, self.config.expand_expression or DEFAULT_EXPAND_EXPRESSION
        )
        # None leaves the page size to the endpoint.
        expand_query.number_of_results = self.config.maximum_expanded_results
        expand_query.first_result = 0

        if self.config.range_field:
            window = self._range_window(top, self.config.range_field)
            if window is not None:
                expand_query.range_constraints.append(window)

        expand_query.filter_field = None
        expand_query.filter_field_range = None
        return expand_query

    def more_results(self, top: ResultRecord, query: Query) -> List[ResultRecord]:
        """Fetch the rest of ``top``'s group and fold it in.

        Returns the fetched records. Transport errors propagate unchanged and
        leave ``top`` as it was.
        """

        if self.endpoint is None:
            raise ConfigError("FoldingService has no search endpoint to expand results")

        expand_query = self.build_expand_query(top, query)
        logger.debug("Expanding %s with %s", top.unique_id, expand_query.filter_expression)
        response = self.endpoint.search(expand_query)

        fetched = list(response.results)
        top.child_results = flatten_forest(top) + fetched
        build_forest(top)
        self._rearrange(top)
        logger.debug("Expanded %s with %d fetched result(s)", top.unique_id, len(fetched))
        return fetched

    def _attach_more_results(self, top: ResultRecord, query: Query) -> None:
        if self.is_expandable(top):
            top.more_results = partial(self.more_results, top, query)

    def _range_window(self, top: ResultRecord, range_field: str) -> Optional[RangeConstraint]:
        value = find_field_value(top, range_field)
        try:
            center = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.debug(
                "Result %s has no numeric %s; expanding without range",
                top.unique_id,
                range_field,
            )
            return None
        width = self.config.range_width
        return RangeConstraint(range_field, center - width, center + width)

    def _rearrange(self, top: ResultRecord) -> None:
        criteria = self.config.sort_criteria
        if criteria is None:
            return
        field, descending = criteria
        # Numbers sort numerically ahead of other values, which sort as text; missing values go last.
        numeric: List[Tuple[float, ResultRecord]] = []
        textual: List[Tuple[str, ResultRecord]] = []
        missing: List[ResultRecord] = []
        for child in top.child_results:
            value = find_field_value(child, field)
            if value is None:
                missing.append(child)
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                numeric.append((value, child))
            else:
                textual.append((str(value), child))
        numeric.sort(key=lambda item: item[0], reverse=descending)
        textual.sort(key=lambda item: item[0], reverse=descending)
        top.child_results = [child for _, child in numeric] + [child for _, child in textual] + missing


__all__ = ["DEFAULT_EXPAND_EXPRESSION", "FoldingService", "SearchEndpoint"]
