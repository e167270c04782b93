from __future__ import annotations

import logging
import math
import numbers
from collections import defaultdict
from collections.abc import Sequence

from catalog_dedupe.errors import InvalidArgumentError
from catalog_dedupe.interfaces import SimilarityScorer
from catalog_dedupe.models import DuplicateGroup, NameMatch, ProductRecord
from catalog_dedupe.steps.normalize import compact_text
from catalog_dedupe.steps.similarity import ProductSimilarityScorer, string_similarity

LOGGER = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.7


class DuplicateGrouper:
    """Pairwise scan of a catalog, clustered into connected components."""

    def __init__(self, scorer: SimilarityScorer | None = None) -> None:
        self._scorer = scorer or ProductSimilarityScorer()

    def find_duplicates(
        self,
        products: Sequence[ProductRecord],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> list[DuplicateGroup]:
        validate_threshold(threshold)
        if len(products) < 2:
            return []
        _ensure_unique_ids(products)

        uf = _UnionFind()
        edges: list[tuple[str, str, float, list[str]]] = []
        for i, left in enumerate(products):
            uf.find(left.id)
            for right in products[i + 1 :]:
                result = self._scorer.compare(left, right)
                if result.score >= threshold:
                    LOGGER.debug("Duplicate edge %s~%s score=%.3f", left.id, right.id, result.score)
                    edges.append((left.id, right.id, result.score, result.reasons))
                    uf.union(left.id, right.id)

        by_id = {product.id: product for product in products}
        edge_map: dict[str, list[tuple[str, str, float, list[str]]]] = defaultdict(list)
        for edge in edges:
            edge_map[uf.find(edge[0])].append(edge)

        groups: list[DuplicateGroup] = []
        for root, members in uf.groups().items():
            if len(members) < 2:
                continue
            component_edges = edge_map[root]
            # Summed in id order so the mean does not depend on catalog order.
            scores = [score for _, _, score, _ in sorted(component_edges, key=_edge_key)]
            reasons: dict[str, None] = {}
            for _, _, _, edge_reasons in component_edges:
                reasons.update(dict.fromkeys(edge_reasons))
            member_ids = sorted(members)
            groups.append(
                DuplicateGroup(
                    group_id=f"group_{member_ids[0]}",
                    products=tuple(by_id[member_id] for member_id in member_ids),
                    score=math.fsum(scores) / len(scores),
                    reasons=tuple(reasons),
                )
            )

        groups.sort(key=lambda group: (-group.score, group.product_ids[0]))
        LOGGER.info(
            "Duplicate scan: products=%d edges=%d groups=%d threshold=%.2f",
            len(products),
            len(edges),
            len(groups),
            threshold,
        )
        return groups


def find_duplicates(
    products: Sequence[ProductRecord],
    threshold: float = DEFAULT_THRESHOLD,
    scorer: SimilarityScorer | None = None,
) -> list[DuplicateGroup]:
    return DuplicateGrouper(scorer).find_duplicates(products, threshold)


def find_name_matches(
    products: Sequence[ProductRecord],
    name: str,
    exclude_id: str | None = None,
    min_similarity: float = DEFAULT_THRESHOLD,
) -> list[NameMatch]:
    """Catalog products whose compacted name resembles ``name``.

    Used when entering a new product to warn about likely duplicates. Equal
    names score 1.0 and a name contained in the other scores 0.9; anything
    else falls back to edit distance. Scores are rounded to whole percents
    before the ``min_similarity`` cut.
    """
    validate_threshold(min_similarity, field="min_similarity")
    target = compact_text(name)
    if not target:
        return []

    matches: list[NameMatch] = []
    for product in products:
        if product.id == exclude_id or not product.name.strip():
            continue
        similarity = _lookup_similarity(target, compact_text(product.name))
        if similarity >= min_similarity:
            matches.append(NameMatch(product=product, similarity=similarity))
    matches.sort(key=lambda match: (-match.similarity, match.product.id))
    return matches


def _lookup_similarity(target: str, candidate: str) -> float:
    if target == candidate:
        return 1.0
    if target in candidate or candidate in target:
        return 0.9
    return int(string_similarity(target, candidate) * 100 + 0.5) / 100


def validate_threshold(threshold: object, field: str = "threshold") -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, numbers.Real):
        raise InvalidArgumentError(f"{field} must be a number, got {threshold!r}", field=field)
    value = float(threshold)
    if math.isnan(value) or not 0.0 < value <= 1.0:
        raise InvalidArgumentError(f"{field} must be in (0, 1], got {threshold!r}", field=field)
    return value


def _ensure_unique_ids(products: Sequence[ProductRecord]) -> None:
    seen: set[str] = set()
    for product in products:
        if product.id in seen:
            raise InvalidArgumentError(f"duplicate product id in catalog: {product.id}", field="id")
        seen.add(product.id)


def _edge_key(edge: tuple[str, str, float, list[str]]) -> tuple[str, str]:
    left, right = sorted((edge[0], edge[1]))
    return left, right


class _UnionFind:
    def __init__(self) -> None:
        self._parent: dict[str, str] = {}

    def find(self, item: str) -> str:
        if item not in self._parent:
            self._parent[item] = item
            return item
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, left: str, right: str) -> None:
        root_left = self.find(left)
        root_right = self.find(right)
        if root_left != root_right:
            self._parent[root_right] = root_left

    def groups(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = defaultdict(list)
        for item in list(self._parent):
            grouped[self.find(item)].append(item)
        return grouped
