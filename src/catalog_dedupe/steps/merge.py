from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from catalog_dedupe.errors import DedupeError, MergeConflictError, NotFoundError
from catalog_dedupe.interfaces import CatalogStore
from catalog_dedupe.models import AuditEntry, MergeRequest, MergeResult, ProductRecord

LOGGER = logging.getLogger(__name__)

# Reconcilable fields, in the order they are considered.
MERGE_FIELDS = ("name", "description", "price", "brand", "category")

# Passthrough ids that travel with the display value when a field is filled.
_LINKED_ATTRIBUTES = {"brand": "brand_id", "category": "category_id"}
_RECORD_ATTRIBUTES = {
    "name": "name",
    "description": "description",
    "price": "price",
    "brand": "brand_name",
    "category": "category_name",
}


class MergeCoordinator:
    """Absorb duplicate products into a primary record in one transaction.

    Either the primary update, the duplicate deletes and the audit entry are
    all applied, or none of them are.
    """

    def __init__(
        self,
        store: CatalogStore,
        clock: Callable[[], datetime] | None = None,
        default_actor: str = "system",
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._default_actor = default_actor

    def merge(self, request: MergeRequest) -> MergeResult:
        request.validate()
        # Fail before opening a transaction when ids are already gone.
        self._load(request.primary_id)
        for duplicate_id in request.duplicate_ids:
            self._load(duplicate_id)

        try:
            with self._store.transaction():
                primary = self._load(request.primary_id)
                duplicates = [self._load(duplicate_id) for duplicate_id in request.duplicate_ids]

                merged, updated_fields = reconcile(primary, duplicates, request)
                self._store.update_product(merged)
                self._store.delete_products(request.duplicate_ids)

                audit = AuditEntry(
                    actor=request.actor or self._default_actor,
                    action="MERGE",
                    entity_type="PRODUCT",
                    entity_id=primary.id,
                    details={
                        "merged_ids": list(request.duplicate_ids),
                        "updated_fields": list(updated_fields),
                        "summary": (
                            f"Merged {len(request.duplicate_ids)} duplicate products into {merged.name}"
                        ),
                    },
                    timestamp=self._clock(),
                )
                self._store.append(audit)
        except DedupeError:
            LOGGER.warning("Merge into %s rolled back", request.primary_id)
            raise
        except Exception as exc:
            LOGGER.warning("Merge into %s rolled back: %s", request.primary_id, exc)
            raise MergeConflictError(f"merge into {request.primary_id} failed: {exc}") from exc

        LOGGER.info(
            "Merged %d duplicates into %s (updated fields: %s)",
            len(request.duplicate_ids),
            merged.id,
            ", ".join(updated_fields) or "none",
        )
        return MergeResult(
            primary=merged,
            merged_ids=tuple(request.duplicate_ids),
            updated_fields=updated_fields,
            audit=audit,
        )

    def _load(self, product_id: str) -> ProductRecord:
        record = self._store.get_product(product_id)
        if record is None:
            raise NotFoundError(product_id)
        return record


def merge_duplicates(store: CatalogStore, request: MergeRequest) -> MergeResult:
    return MergeCoordinator(store).merge(request)


def reconcile(
    primary: ProductRecord,
    duplicates: list[ProductRecord],
    request: MergeRequest,
) -> tuple[ProductRecord, tuple[str, ...]]:
    """Apply the field policy; the first non-empty duplicate value wins."""
    changes: dict[str, Any] = {}
    attributes = dict(primary.attributes)
    updated: list[str] = []

    for field_name in MERGE_FIELDS:
        if request.field_policy.keeps(field_name):
            continue
        record_attr = _RECORD_ATTRIBUTES[field_name]
        if not _is_blank(getattr(primary, record_attr)):
            continue
        donor = next(
            (duplicate for duplicate in duplicates if not _is_blank(getattr(duplicate, record_attr))),
            None,
        )
        if donor is None:
            continue
        changes[record_attr] = getattr(donor, record_attr)
        linked = _LINKED_ATTRIBUTES.get(field_name)
        if linked and donor.attributes.get(linked) is not None:
            attributes[linked] = donor.attributes[linked]
        updated.append(field_name)

    if attributes != primary.attributes:
        changes["attributes"] = attributes
    return primary.with_changes(**changes), tuple(updated)


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
