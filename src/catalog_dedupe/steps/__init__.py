from catalog_dedupe.steps.grouping import DuplicateGrouper, find_duplicates, find_name_matches
from catalog_dedupe.steps.merge import MergeCoordinator, merge_duplicates
from catalog_dedupe.steps.normalize import normalize_text
from catalog_dedupe.steps.similarity import (
    ProductSimilarityScorer,
    compare_products,
    levenshtein,
    string_similarity,
)

__all__ = [
    "DuplicateGrouper",
    "MergeCoordinator",
    "ProductSimilarityScorer",
    "compare_products",
    "find_duplicates",
    "find_name_matches",
    "levenshtein",
    "merge_duplicates",
    "normalize_text",
    "string_similarity",
]
