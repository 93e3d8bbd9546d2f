"""Unit tests for the cache-through listing and invalidation-on-write paths.

This module tests:
- Cache hit/miss accounting (store queries, cache writes, TTL)
- Absorption of cache failures on reads and on invalidation
- Store failures propagating without anything being cached
- Invalidation after every mutation
- The accepted stale-repopulation race
"""

import json

import pytest

from backend.modules.product.services.product_catalog_service import (
    LISTING_CACHE_KEY,
    ProductCatalogService,
)
from shared.modules.product.errors import (
    CacheUnavailableError,
    NotFoundError,
    StoreUnavailableError,
    ValidationFailureError,
)


@pytest.fixture
def seeded_store(store):
    store.insert_many([
        {"name": "Widget", "description": "Small", "price": 9.99, "category": "Electronics"},
        {"name": "Novel", "description": "Paperback", "price": 15.0, "category": "Books"},
    ])
    store.calls.clear()
    return store


# ==================== Read-through ====================


@pytest.mark.unit
def test_miss_queries_store_once_and_populates_cache(service, seeded_store, cache):
    listing = service.get_listing()

    assert len(listing) == 2
    assert seeded_store.calls["find_all"] == 1
    assert cache.calls["set"] == 1
    assert cache.ttls[LISTING_CACHE_KEY] == 3600
    assert json.loads(cache.data[LISTING_CACHE_KEY]) == listing


@pytest.mark.unit
def test_hit_performs_zero_store_queries(service, seeded_store, cache):
    first = service.get_listing()
    seeded_store.calls.clear()

    second = service.get_listing()

    assert second == first
    assert seeded_store.calls["find_all"] == 0
    assert cache.calls["set"] == 1


@pytest.mark.unit
def test_listing_ids_are_strings(service, seeded_store):
    listing = service.get_listing()

    assert all(isinstance(p["_id"], str) for p in listing)


@pytest.mark.unit
def test_cache_hit_matches_direct_store_read(service, seeded_store):
    service.get_listing()

    assert service.get_listing() == service.list_products()


@pytest.mark.unit
def test_expired_entry_is_repopulated(service, seeded_store, cache):
    service.get_listing()
    cache.expire(LISTING_CACHE_KEY)

    service.get_listing()

    assert seeded_store.calls["find_all"] == 2
    assert cache.calls["set"] == 2


@pytest.mark.unit
def test_cache_read_failure_falls_back_to_store(service, seeded_store, cache):
    cache.fail_get = True

    listing = service.get_listing()

    assert len(listing) == 2
    assert seeded_store.calls["find_all"] == 1


@pytest.mark.unit
def test_cache_write_failure_still_returns_data(service, seeded_store, cache):
    cache.fail_set = True

    listing = service.get_listing()

    assert [p["name"] for p in listing] == ["Widget", "Novel"]
    assert LISTING_CACHE_KEY not in cache.data


@pytest.mark.unit
def test_store_failure_propagates_and_caches_nothing(service, seeded_store, cache):
    seeded_store.down = True

    with pytest.raises(StoreUnavailableError):
        service.get_listing()

    assert cache.calls["set"] == 0
    assert LISTING_CACHE_KEY not in cache.data


@pytest.mark.unit
def test_undecodable_cache_entry_is_treated_as_miss(service, seeded_store, cache):
    cache.data[LISTING_CACHE_KEY] = "{not json"

    listing = service.get_listing()

    assert len(listing) == 2
    assert json.loads(cache.data[LISTING_CACHE_KEY]) == listing


# ==================== Invalidation on write ====================


@pytest.mark.unit
@pytest.mark.parametrize("mutation", ["create", "update", "delete", "populate"])
def test_every_mutation_evicts_listing(service, seeded_store, cache, mutation):
    service.get_listing()
    product_id = str(seeded_store.docs[0]["_id"])

    if mutation == "create":
        service.create_product({"name": "Gadget"})
    elif mutation == "update":
        service.update_product(product_id, {"price": 1.0})
    elif mutation == "delete":
        service.delete_product(product_id)
    else:
        service.populate(5)

    assert cache.calls["delete"] == 1
    assert LISTING_CACHE_KEY not in cache.data


@pytest.mark.unit
def test_mutation_succeeds_when_invalidation_fails(service, seeded_store, cache):
    service.get_listing()
    cache.fail_delete = True

    result = service.create_product({"name": "Gadget", "price": 3})

    assert result["acknowledged"] is True
    assert cache.calls["delete"] == 1
    assert len(seeded_store.docs) == 3
    # Stale entry survives until TTL
    assert len(json.loads(cache.data[LISTING_CACHE_KEY])) == 2


@pytest.mark.unit
def test_failed_mutation_does_not_invalidate(service, seeded_store, cache):
    seeded_store.down = True

    with pytest.raises(StoreUnavailableError):
        service.create_product({"name": "Gadget"})

    assert cache.calls["delete"] == 0


@pytest.mark.unit
def test_invalid_payload_touches_neither_store_nor_cache(service, seeded_store, cache):
    with pytest.raises(ValidationFailureError):
        service.create_product({"price": "not a number"})

    assert seeded_store.calls["insert_one"] == 0
    assert cache.calls["delete"] == 0


@pytest.mark.unit
def test_empty_update_is_rejected(service, seeded_store):
    product_id = str(seeded_store.docs[0]["_id"])

    with pytest.raises(ValidationFailureError):
        service.update_product(product_id, {})


@pytest.mark.unit
def test_update_of_missing_product_reports_zero_counts(service, seeded_store, cache):
    result = service.update_product("000000000000000000000000", {"price": 2})

    assert result == {"acknowledged": True, "matchedCount": 0, "modifiedCount": 0}
    assert cache.calls["delete"] == 1


@pytest.mark.unit
def test_clear_cache_is_idempotent(service, cache):
    assert service.clear_cache() == {"message": "Cache cleared successfully"}
    assert service.clear_cache() == {"message": "Cache cleared successfully"}


@pytest.mark.unit
def test_clear_cache_surfaces_cache_failure(service, cache):
    cache.fail_delete = True

    with pytest.raises(CacheUnavailableError):
        service.clear_cache()


# ==================== Populate / lookups ====================


@pytest.mark.unit
def test_populate_inserts_default_thousand(service, store):
    result = service.populate()

    assert result == {"message": "Database populated successfully", "insertedCount": 1000}
    assert len(store.docs) == 1000


@pytest.mark.unit
@pytest.mark.parametrize("count", [0, -1, 10001, "5", 2.5, True])
def test_populate_rejects_bad_counts(service, count):
    with pytest.raises(ValidationFailureError):
        service.populate(count)


@pytest.mark.unit
def test_get_product_missing_raises_not_found(service, seeded_store):
    with pytest.raises(NotFoundError):
        service.get_product("does-not-exist")


@pytest.mark.unit
def test_stats_on_empty_collection(service):
    assert service.get_stats() == {
        "count": 0,
        "avgPrice": None,
        "minPrice": None,
        "maxPrice": None,
        "categoryBreakdown": {},
    }


# ==================== Concurrency ====================


@pytest.mark.unit
def test_stale_repopulation_race_is_bounded_by_next_eviction(seeded_store, cache):
    """A reader that queried before a write can cache its older listing after
    the write's eviction. The stale entry lives until the next eviction or TTL."""
    service = ProductCatalogService(seeded_store, cache, ttl_seconds=3600)
    real_find_all = seeded_store.find_all

    def find_all_then_concurrent_write():
        listing = real_find_all()
        seeded_store.find_all = real_find_all
        service.create_product({"name": "Late arrival"})
        return listing

    seeded_store.find_all = find_all_then_concurrent_write

    stale = service.get_listing()
    assert "Late arrival" not in [p["name"] for p in stale]
    assert service.get_listing() == stale

    service.invalidate_listing()
    fresh = service.get_listing()
    assert "Late arrival" in [p["name"] for p in fresh]
