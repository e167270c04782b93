"""Exception hierarchy for duplicate detection and merging."""

from __future__ import annotations


class DedupeError(Exception):
    """Base error for catalog dedupe failures."""


class InvalidArgumentError(DedupeError, ValueError):
    """Raised for malformed thresholds, merge requests and payloads."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(DedupeError, LookupError):
    """Raised when a product id does not resolve to a catalog record."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"product not found: {product_id}")
        self.product_id = product_id


class MergeConflictError(DedupeError):
    """Raised when the catalog store fails mid-merge; nothing was applied."""


class ConfigurationError(DedupeError):
    """Raised when environment configuration cannot be parsed."""
