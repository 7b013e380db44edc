"""Custom exception hierarchy for result folding."""


class FoldingError(Exception):
    """Base exception for result folding errors."""


class ConfigError(FoldingError):
    """Raised when folding configuration is invalid or incomplete."""


class FieldNotFoundError(FoldingError, KeyError):
    """Raised when a result does not carry the requested raw field."""

    def __init__(self, field: str, unique_id: str | None = None) -> None:
        message = f"Field '{field}' not found"
        if unique_id is not None:
            message = f"{message} on result '{unique_id}'"
        super().__init__(message)
        self.field = field
        self.unique_id = unique_id

    def __str__(self) -> str:
        return str(self.args[0])


class TransportError(FoldingError):
    """Raised when the search endpoint fails to answer a query."""
