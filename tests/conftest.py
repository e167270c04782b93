"""Shared fixtures for catalog dedupe tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from catalog_dedupe.models import ProductRecord, SimilarityResult
from catalog_dedupe.stores import InMemoryCatalogStore, SqlCatalogStore


def make_product(
    product_id: str,
    name: str = "",
    sku: str = "",
    brand: str | None = None,
    category: str | None = None,
    description: str | None = None,
    price: str | None = None,
    **attributes,
) -> ProductRecord:
    return ProductRecord(
        id=product_id,
        name=name,
        sku=sku,
        brand_name=brand,
        category_name=category,
        description=description,
        price=Decimal(price) if price is not None else None,
        attributes=dict(attributes),
    )


class StubScorer:
    """Returns fixed scores for id pairs; unknown pairs score 0."""

    def __init__(self, scores: dict[tuple[str, str], tuple[float, list[str]]]) -> None:
        self._scores = {tuple(sorted(pair)): value for pair, value in scores.items()}
        self.calls: list[tuple[str, str]] = []

    def compare(self, left: ProductRecord, right: ProductRecord) -> SimilarityResult:
        self.calls.append((left.id, right.id))
        score, reasons = self._scores.get(tuple(sorted((left.id, right.id))), (0.0, []))
        return SimilarityResult(score=score, reasons=list(reasons))


@pytest.fixture
def merge_catalog() -> list[ProductRecord]:
    return [
        make_product("p1", name="Widget", sku="WID-1"),
        make_product(
            "d1",
            name="Widget Deluxe Edition",
            sku="WID-1-D",
            description="First description",
            price="10.50",
        ),
        make_product(
            "d2",
            name="Widget",
            sku="WID-1-B",
            brand="Acme",
            category="Tools",
            description="Second description",
            price="12.00",
            brand_id="brand-acme",
            category_id="cat-tools",
        ),
        make_product("other", name="Gadget", sku="GAD-9"),
    ]


@pytest.fixture
def memory_store(merge_catalog: list[ProductRecord]) -> InMemoryCatalogStore:
    return InMemoryCatalogStore(merge_catalog)


@pytest.fixture
def sql_store(tmp_path, merge_catalog: list[ProductRecord]):
    store = SqlCatalogStore(f"sqlite:///{tmp_path / 'catalog.db'}")
    for product in merge_catalog:
        store.add_product(product)
    yield store
    store.close()
