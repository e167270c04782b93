from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, Sequence

from catalog_dedupe.models import AuditEntry, ProductRecord, SimilarityResult


class SimilarityScorer(Protocol):
    """Pure pairwise comparison of two products."""

    def compare(self, left: ProductRecord, right: ProductRecord) -> SimilarityResult:
        ...


class CatalogReader(Protocol):
    """Read access to the product catalog."""

    def list_products(self) -> list[ProductRecord]:
        ...


class AuditSink(Protocol):
    """Append-only audit log."""

    def append(self, entry: AuditEntry) -> None:
        ...

    def list_audit_entries(self) -> list[AuditEntry]:
        ...


class CatalogStore(CatalogReader, AuditSink, Protocol):
    """Mutable catalog with an all-or-nothing transaction scope.

    Writes issued inside ``transaction()`` are applied together or not at all.
    """

    def get_product(self, product_id: str) -> ProductRecord | None:
        ...

    def add_product(self, record: ProductRecord) -> None:
        ...

    def update_product(self, record: ProductRecord) -> None:
        ...

    def delete_products(self, product_ids: Sequence[str]) -> None:
        ...

    def transaction(self) -> AbstractContextManager[None]:
        ...
