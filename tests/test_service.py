from dataclasses import FrozenInstanceError
from datetime import UTC, datetime

import pytest
from freezegun import freeze_time

from catalog_dedupe.cache import ScanCache
from catalog_dedupe.config import DedupeConfig
from catalog_dedupe.errors import InvalidArgumentError, NotFoundError
from catalog_dedupe.service import DuplicateService
from catalog_dedupe.stores import InMemoryCatalogStore
from conftest import make_product


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def catalog_store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore(
        [
            make_product("a", name="iPhone 15 Pro", sku="APPLE-IP15P-128", brand="Apple"),
            make_product("b", name="iPhone 15 Pro - Space Black", sku="APPLE-IP15P-SB-128", brand="Apple"),
            make_product("c", name="Galaxy S24 Ultra", sku="SAMSUNG-S24U", brand="Samsung"),
        ]
    )


@freeze_time("2024-01-15 10:30:00")
def test_scan_returns_groups_and_writes_audit_entry(catalog_store) -> None:
    service = DuplicateService(catalog_store)

    groups = service.scan(actor="alice")

    assert [group.product_ids for group in groups] == [["a", "b"]]
    entries = catalog_store.list_audit_entries()
    assert len(entries) == 1
    assert entries[0].action == "SCAN"
    assert entries[0].actor == "alice"
    assert entries[0].details == {"threshold": 0.7, "groups_found": 1}
    assert entries[0].timestamp == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


def test_scan_is_served_from_cache_until_ttl_expires(catalog_store) -> None:
    clock = FakeClock()
    service = DuplicateService(catalog_store, cache=ScanCache(60, clock=clock))

    first = service.scan(0.7)
    catalog_store.add_product(make_product("d", name="iPhone 15 Pro", sku="APPLE-IP15P-128"))
    second = service.scan(0.7)

    assert [g.product_ids for g in second] == [g.product_ids for g in first]
    assert len(catalog_store.list_audit_entries()) == 1

    clock.now = 61
    third = service.scan(0.7)

    assert third[0].product_ids == ["a", "b", "d"]
    assert len(catalog_store.list_audit_entries()) == 2


def test_merge_invalidates_cached_scan(catalog_store) -> None:
    service = DuplicateService(catalog_store, cache=ScanCache(3600))
    service.scan()

    result = service.merge(
        {"primaryProductId": "a", "duplicateProductIds": ["b"], "mergeOptions": {"keepName": True}},
        actor="bob",
    )

    assert result.merged_ids == ("b",)
    assert result.audit.actor == "bob"
    assert service.scan() == []
    assert [entry.action for entry in catalog_store.list_audit_entries()] == ["SCAN", "MERGE", "SCAN"]


def test_cached_groups_cannot_be_altered_by_callers(catalog_store) -> None:
    service = DuplicateService(catalog_store, cache=ScanCache(3600))
    first = service.scan()

    with pytest.raises(AttributeError):
        first[0].products.clear()
    with pytest.raises(FrozenInstanceError):
        first[0].products = ()
    first.clear()

    second = service.scan()
    assert [group.product_ids for group in second] == [["a", "b"]]
    assert len(catalog_store.list_audit_entries()) == 1


def test_failed_merge_still_invalidates_cache(catalog_store) -> None:
    cache = ScanCache(3600)
    service = DuplicateService(catalog_store, cache=cache)
    service.scan()

    with pytest.raises(NotFoundError):
        service.merge({"primaryProductId": "a", "duplicateProductIds": ["zzz"]})

    assert cache.get(0.7) is None


def test_scan_audit_can_be_disabled(catalog_store) -> None:
    service = DuplicateService(catalog_store, config=DedupeConfig(audit_scans=False, cache_ttl_seconds=0))

    service.scan()
    service.scan()

    assert catalog_store.list_audit_entries() == []


def test_scan_uses_configured_threshold(catalog_store) -> None:
    service = DuplicateService(catalog_store, config=DedupeConfig(threshold=0.95))

    assert service.scan() == []


def test_scan_rejects_invalid_threshold(catalog_store) -> None:
    service = DuplicateService(catalog_store)

    with pytest.raises(InvalidArgumentError):
        service.scan(1.5)


def test_merge_uses_default_actor(catalog_store) -> None:
    service = DuplicateService(catalog_store, config=DedupeConfig(default_actor="batch-job"))

    result = service.merge({"primaryProductId": "a", "duplicateProductIds": ["b"]})

    assert result.audit.actor == "batch-job"


def test_check_name_lists_similar_products(catalog_store) -> None:
    service = DuplicateService(catalog_store)

    matches = service.check_name("iphone 15 pro", exclude_id="a")

    assert [(m.product.id, m.similarity) for m in matches] == [("b", 0.9)]
    assert [m.product.id for m in service.check_name("iPhone 15 Pro")] == ["a", "b"]
    assert service.check_name("Galaxy Tab") == []


def test_scan_cache_disabled_with_zero_ttl() -> None:
    cache = ScanCache(0)
    cache.put(0.7, [])

    assert not cache.enabled
    assert cache.get(0.7) is None


def test_scan_cache_rejects_negative_ttl() -> None:
    with pytest.raises(ValueError):
        ScanCache(-1)
