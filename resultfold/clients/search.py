"""Client for a REST search endpoint that returns folding metadata.

One query is one ``POST <base_url>/search`` with the query descriptor as JSON.
Connection failures, rate limits and 5xx answers are retried with tenacity;
whatever still fails surfaces as a :class:`SearchRequestError`, which callers
of ``more_results`` see unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional

import requests
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from resultfold.core.models import Query, QueryResults
from resultfold.exceptions import ConfigError, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "resultfold"
MAX_ATTEMPTS = 3
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

_EXCERPT_LIMIT = 200
_backoff = wait_exponential(multiplier=0.5, min=0.5, max=8)


class SearchRequestError(TransportError):
    """Raised when a query does not come back as a usable result set."""

    def __init__(
        self, message: str, *, status: Optional[int] = None, body_excerpt: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body_excerpt = body_excerpt


class QueryRejectedError(SearchRequestError):
    """Raised when the endpoint refuses the query itself (HTTP 4xx)."""


class UnauthorizedError(QueryRejectedError):
    """Raised for HTTP 401/403, typically a missing or expired access token."""


class RateLimitedError(SearchRequestError):
    """Raised when the endpoint still rate limits after the last attempt."""

    def __init__(self, message: str, *, retry_after: Optional[float] = None) -> None:
        super().__init__(message, status=429)
        self.retry_after = retry_after


class UpstreamError(SearchRequestError):
    """Raised for 5xx answers, network failures and malformed result sets."""


class _RetryableStatus(Exception):
    def __init__(self, response: requests.Response) -> None:
        super().__init__(f"Retryable status {response.status_code}")
        self.response = response


def retry_after_seconds(response: requests.Response) -> Optional[float]:
    """Return the delay requested by a ``Retry-After`` header, if any."""

    value = (response.headers.get("Retry-After") or "").strip()
    if not value:
        return None
    if value.isdigit():
        return float(value)
    try:
        moment = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return max((moment - datetime.now(timezone.utc)).total_seconds(), 0.0)


def _wait_before_retry(retry_state: RetryCallState) -> float:
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None and outcome.failed else None
    if isinstance(error, _RetryableStatus):
        delay = retry_after_seconds(error.response)
        if delay is not None:
            return delay
    return _backoff(retry_state)


def _excerpt(response: requests.Response) -> Optional[str]:
    try:
        text = response.text
    except (UnicodeDecodeError, LookupError):
        return None
    return " ".join(text.split())[:_EXCERPT_LIMIT] or None


class SearchEndpointClient:
    """Submit query descriptors to ``<base_url>/search`` and parse result sets.

    Results carry ``parentResult``, ``childResults`` and
    ``totalNumberOfChildResults`` as produced by an index that folds on the
    server side; they are deserialized as-is and folded by the caller.
    """

    SEARCH_PATH = "/search"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        access_token: Optional[str] = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ConfigError("SearchEndpointClient requires a base URL")
        self.base_url = base_url.strip().rstrip("/")
        self.search_url = f"{self.base_url}{self.SEARCH_PATH}"
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session
        self.timeout = timeout
        self.access_token = access_token

    def search(self, query: Query) -> QueryResults:
        """Execute ``query`` and return the deserialized result set."""

        payload = query.to_payload()
        logger.debug("Searching %s with %s", self.search_url, payload)
        response = self._submit(payload)
        self._raise_for_status(response)
        return self._parse(response)

    @retry(
        reraise=True,
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=_wait_before_retry,
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout, _RetryableStatus)),
    )
    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        response = self.session.post(
            self.search_url, json=payload, headers=self._headers(), timeout=self.timeout
        )
        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.debug("Search endpoint answered %d; retrying", response.status_code)
            raise _RetryableStatus(response)
        return response

    def _submit(self, payload: Dict[str, Any]) -> requests.Response:
        try:
            return self._post(payload)
        except _RetryableStatus as exc:
            return exc.response
        except requests.RequestException as exc:
            raise UpstreamError(f"Search request failed: {exc}") from exc

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _raise_for_status(self, response: requests.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        excerpt = _excerpt(response)
        detail = f": {excerpt}" if excerpt else ""
        if status == 429:
            raise RateLimitedError(
                "Search endpoint rate limit exceeded", retry_after=retry_after_seconds(response)
            )
        if status >= 500:
            raise UpstreamError(
                f"Search endpoint error{detail} ({status})", status=status, body_excerpt=excerpt
            )
        if status in (401, 403):
            raise UnauthorizedError(
                f"Search endpoint refused the access token ({status})",
                status=status,
                body_excerpt=excerpt,
            )
        if status == 404:
            raise QueryRejectedError(
                f"No search endpoint at {self.search_url} ({status})", status=status
            )
        raise QueryRejectedError(f"Query rejected{detail} ({status})", status=status, body_excerpt=excerpt)

    def _parse(self, response: requests.Response) -> QueryResults:
        try:
            body: Any = response.json()
        except ValueError as exc:
            raise UpstreamError("Search endpoint returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise UpstreamError("Search endpoint returned an unexpected payload")

        try:
            return QueryResults.from_payload(body)
        except (TypeError, ValueError) as exc:
            raise UpstreamError(f"Malformed search response: {exc}") from exc


__all__ = [
    "QueryRejectedError",
    "RateLimitedError",
    "SearchEndpointClient",
    "SearchRequestError",
    "UnauthorizedError",
    "UpstreamError",
    "retry_after_seconds",
]
