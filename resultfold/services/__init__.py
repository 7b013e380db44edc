"""Service layer for the resultfold package."""

from .folding_service import DEFAULT_EXPAND_EXPRESSION, FoldingService, SearchEndpoint

__all__ = ["DEFAULT_EXPAND_EXPRESSION", "FoldingService", "SearchEndpoint"]
