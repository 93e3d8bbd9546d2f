"""Pytest configuration and shared fixtures for the catalog tests.

This module provides:
- In-memory stand-ins for the MongoDB store and the Redis cache
- A Flask app wired with those stand-ins, and its test client
"""

import threading
from collections import Counter
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId

from backend.app import create_app
from backend.config import Settings
from backend.modules.product.services.product_catalog_service import ProductCatalogService
from shared.modules.cache.cache_store import CacheStore
from shared.modules.product.errors import (
    CacheUnavailableError,
    NotFoundError,
    StoreUnavailableError,
)
from shared.modules.product.models.product import ProductStats


# ==================== Fakes ====================

class FakeProductStore:
    """Dict-backed store exposing the ProductModel operations, with call counts."""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.calls = Counter()
        self.down = False
        self._lock = threading.Lock()

    def _record(self, operation: str):
        with self._lock:
            self.calls[operation] += 1
        if self.down:
            raise StoreUnavailableError(f"{operation} failed: connection refused")

    def _find(self, doc_id: str) -> Optional[Dict[str, Any]]:
        return next((d for d in self.docs if str(d["_id"]) == doc_id), None)

    def find_all(self):
        self._record("find_all")
        return [dict(d) for d in self.docs]

    def find_by_id(self, doc_id):
        self._record("find_by_id")
        doc = self._find(doc_id)
        if doc is None:
            raise NotFoundError(doc_id)
        return dict(doc)

    def insert_one(self, doc):
        self._record("insert_one")
        doc = dict(doc, _id=ObjectId())
        self.docs.append(doc)
        return str(doc["_id"])

    def insert_many(self, docs):
        self._record("insert_many")
        for doc in docs:
            self.docs.append(dict(doc, _id=ObjectId()))
        return len(docs)

    def update_one(self, doc_id, patch):
        self._record("update_one")
        doc = self._find(doc_id)
        if doc is None:
            return {"matchedCount": 0, "modifiedCount": 0}
        doc.update(patch)
        return {"matchedCount": 1, "modifiedCount": 1}

    def delete_one(self, doc_id):
        self._record("delete_one")
        doc = self._find(doc_id)
        if doc is None:
            return 0
        self.docs.remove(doc)
        return 1

    def search(self, query):
        self._record("search")
        needle = query.lower()
        return [
            dict(d) for d in self.docs
            if needle in str(d.get("name", "")).lower()
            or needle in str(d.get("description", "")).lower()
        ]

    def aggregate_stats(self):
        self._record("aggregate_stats")
        prices = [d["price"] for d in self.docs if d.get("price") is not None]
        breakdown = Counter(d.get("category") or "uncategorized" for d in self.docs)
        return ProductStats(
            count=len(self.docs),
            avgPrice=sum(prices) / len(prices) if prices else None,
            minPrice=min(prices) if prices else None,
            maxPrice=max(prices) if prices else None,
            categoryBreakdown=dict(breakdown),
        )

    def ensure_indexes(self):
        self._record("ensure_indexes")

    def ping(self):
        return not self.down


class FakeCacheStore(CacheStore):
    """Dict-backed cache. Each operation can be made to fail independently."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.calls = Counter()
        self.fail_get = False
        self.fail_set = False
        self.fail_delete = False
        self.closed = False

    def get(self, key):
        self.calls["get"] += 1
        if self.fail_get:
            raise CacheUnavailableError("Redis GET failed: connection refused")
        return self.data.get(key)

    def set(self, key, value, ttl_seconds):
        self.calls["set"] += 1
        if self.fail_set:
            raise CacheUnavailableError("Redis SET failed: connection refused")
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    def delete(self, key):
        self.calls["delete"] += 1
        if self.fail_delete:
            raise CacheUnavailableError("Redis DELETE failed: connection refused")
        self.data.pop(key, None)
        self.ttls.pop(key, None)

    def ping(self):
        return not (self.fail_get or self.fail_set or self.fail_delete)

    def close(self):
        self.closed = True

    def expire(self, key):
        """Simulate TTL expiry."""
        self.data.pop(key, None)


# ==================== Fixtures ====================

@pytest.fixture
def store() -> FakeProductStore:
    return FakeProductStore()


@pytest.fixture
def cache() -> FakeCacheStore:
    return FakeCacheStore()


@pytest.fixture
def service(store, cache) -> ProductCatalogService:
    return ProductCatalogService(store, cache, ttl_seconds=3600)


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.setenv("CACHE_TTL_SECONDS", "3600")
    return Settings()


@pytest.fixture
def app(settings, store, cache):
    app = create_app(settings=settings, store=store, cache=cache)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
