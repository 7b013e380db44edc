"""HTTP client used to reach the search endpoint."""

from .search import (
    QueryRejectedError,
    RateLimitedError,
    SearchEndpointClient,
    SearchRequestError,
    UnauthorizedError,
    UpstreamError,
)

__all__ = [
    "QueryRejectedError",
    "RateLimitedError",
    "SearchEndpointClient",
    "SearchRequestError",
    "UnauthorizedError",
    "UpstreamError",
]
