"""Hierarchy building for folded result groups."""

from .builder import GetResult, build_forest, flatten_forest, fold_result, promote_parent

__all__ = ["GetResult", "build_forest", "flatten_forest", "fold_result", "promote_parent"]
