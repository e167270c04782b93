from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager

from catalog_dedupe.errors import InvalidArgumentError, NotFoundError
from catalog_dedupe.models import AuditEntry, ProductRecord


class InMemoryCatalogStore:
    """Dict-backed catalog for tests and small local runs.

    ``transaction()`` snapshots products and the audit log and restores both
    if the block raises.
    """

    def __init__(self, products: Iterable[ProductRecord] = ()) -> None:
        self._lock = threading.RLock()
        self._products: dict[str, ProductRecord] = {}
        self._audit: list[AuditEntry] = []
        for product in products:
            self.add_product(product)

    def list_products(self) -> list[ProductRecord]:
        with self._lock:
            return list(self._products.values())

    def get_product(self, product_id: str) -> ProductRecord | None:
        with self._lock:
            return self._products.get(product_id)

    def add_product(self, record: ProductRecord) -> None:
        with self._lock:
            if record.id in self._products:
                raise InvalidArgumentError(f"product already exists: {record.id}", field="id")
            self._products[record.id] = record

    def update_product(self, record: ProductRecord) -> None:
        with self._lock:
            if record.id not in self._products:
                raise NotFoundError(record.id)
            self._products[record.id] = record

    def delete_products(self, product_ids: Sequence[str]) -> None:
        with self._lock:
            missing = [product_id for product_id in product_ids if product_id not in self._products]
            if missing:
                raise NotFoundError(missing[0])
            for product_id in product_ids:
                del self._products[product_id]

    def append(self, entry: AuditEntry) -> None:
        with self._lock:
            self._audit.append(entry)

    def list_audit_entries(self) -> list[AuditEntry]:
        with self._lock:
            return list(self._audit)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            products = dict(self._products)
            audit = list(self._audit)
            try:
                yield
            except BaseException:
                self._products = products
                self._audit = audit
                raise
