from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from catalog_dedupe.cache import ScanCache
from catalog_dedupe.config import DedupeConfig
from catalog_dedupe.interfaces import CatalogStore, SimilarityScorer
from catalog_dedupe.models import AuditEntry, DuplicateGroup, MergeRequest, MergeResult, NameMatch
from catalog_dedupe.steps.grouping import DuplicateGrouper, find_name_matches, validate_threshold
from catalog_dedupe.steps.merge import MergeCoordinator

LOGGER = logging.getLogger(__name__)


class DuplicateService:
    """Entry points a host application wires to its scan and merge handlers."""

    def __init__(
        self,
        store: CatalogStore,
        config: DedupeConfig | None = None,
        scorer: SimilarityScorer | None = None,
        cache: ScanCache | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._config = config or DedupeConfig()
        self._grouper = DuplicateGrouper(scorer)
        self._cache = cache if cache is not None else ScanCache(self._config.cache_ttl_seconds)
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._coordinator = MergeCoordinator(
            store,
            clock=self._clock,
            default_actor=self._config.default_actor,
        )

    def scan(self, threshold: float | None = None, actor: str | None = None) -> list[DuplicateGroup]:
        value = validate_threshold(self._config.threshold if threshold is None else threshold)
        cached = self._cache.get(value)
        if cached is not None:
            LOGGER.debug("Serving duplicate scan at %.2f from cache", value)
            return cached

        groups = self._grouper.find_duplicates(self._store.list_products(), value)
        self._cache.put(value, groups)

        if self._config.audit_scans:
            self._store.append(
                AuditEntry(
                    actor=actor or self._config.default_actor,
                    action="SCAN",
                    entity_type="PRODUCT",
                    entity_id="duplicate-scan",
                    details={"threshold": value, "groups_found": len(groups)},
                    timestamp=self._clock(),
                )
            )
        return groups

    def merge(
        self,
        request: MergeRequest | Mapping[str, Any],
        actor: str | None = None,
    ) -> MergeResult:
        if not isinstance(request, MergeRequest):
            request = MergeRequest.from_payload(request, actor=actor)
        elif actor is not None and request.actor is None:
            request = MergeRequest(
                primary_id=request.primary_id,
                duplicate_ids=request.duplicate_ids,
                field_policy=request.field_policy,
                actor=actor,
            )
        try:
            return self._coordinator.merge(request)
        finally:
            # Cached groups may reference merged or vanished ids.
            self._cache.invalidate()

    def check_name(self, name: str, exclude_id: str | None = None) -> list[NameMatch]:
        return find_name_matches(
            self._store.list_products(),
            name,
            exclude_id=exclude_id,
            min_similarity=self._config.name_match_threshold,
        )
