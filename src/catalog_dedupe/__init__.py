"""Duplicate product detection and merge for product catalogs."""

from catalog_dedupe.errors import (
    DedupeError,
    InvalidArgumentError,
    MergeConflictError,
    NotFoundError,
)
from catalog_dedupe.models import (
    AuditEntry,
    DuplicateGroup,
    FieldPolicy,
    MergeRequest,
    MergeResult,
    NameMatch,
    ProductRecord,
    SimilarityResult,
)
from catalog_dedupe.steps import (
    DuplicateGrouper,
    MergeCoordinator,
    ProductSimilarityScorer,
    compare_products,
    find_duplicates,
    find_name_matches,
    merge_duplicates,
)

__all__ = [
    "AuditEntry",
    "DedupeError",
    "DuplicateGroup",
    "DuplicateGrouper",
    "FieldPolicy",
    "InvalidArgumentError",
    "MergeConflictError",
    "MergeCoordinator",
    "MergeRequest",
    "MergeResult",
    "NameMatch",
    "NotFoundError",
    "ProductRecord",
    "ProductSimilarityScorer",
    "SimilarityResult",
    "compare_products",
    "find_duplicates",
    "find_name_matches",
    "merge_duplicates",
]
