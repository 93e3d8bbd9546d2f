import logging
from typing import Any, Dict, List

from backend.modules.product.models.product_model import ProductModel
from shared.modules.cache.cache_store import CacheStore
from shared.modules.product.errors import CacheUnavailableError, ValidationFailureError
from shared.modules.product.models.product import Product
from shared.modules.product.product_factory import ProductFactory
from shared.modules.product.serializer import dumps_listing, loads_listing, to_jsonable

logger = logging.getLogger(__name__)

LISTING_CACHE_KEY = "products"
DEFAULT_LISTING_TTL_SECONDS = 3600
DEFAULT_POPULATE_COUNT = 1000
MAX_POPULATE_COUNT = 10000


class ProductCatalogService:
    """
    Product CRUD with a read-through cache in front of the full listing.

    Reads of the listing go cache first and populate it on a miss; every
    successful mutation evicts the cached listing afterwards. There is no
    locking between the two: a reader that queried the store before a write
    can still put its older listing back after the write's eviction. That
    entry lives until the next eviction or the TTL, whichever comes first.
    """

    def __init__(self, store: ProductModel, cache: CacheStore, ttl_seconds: int = DEFAULT_LISTING_TTL_SECONDS):
        self.store = store
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_products(self) -> List[Dict[str, Any]]:
        """Full listing straight from the store, bypassing the cache."""
        return to_jsonable(self.store.find_all())

    def get_listing(self) -> List[Dict[str, Any]]:
        """
        Full listing through the cache.

        Cache errors never fail the read: a failed GET counts as a miss and a
        failed SET still returns the store data. Store errors propagate and
        nothing gets cached.
        """
        cached = self._read_cached_listing()
        if cached is not None:
            logger.info("Listing served from cache")
            return cached

        logger.info("Cache miss - querying store")
        products = to_jsonable(self.store.find_all())

        try:
            self.cache.set(LISTING_CACHE_KEY, dumps_listing(products), self.ttl_seconds)
        except CacheUnavailableError as e:
            logger.warning(f"Could not populate listing cache: {e}")

        return products

    def get_product(self, product_id: str) -> Dict[str, Any]:
        return to_jsonable(self.store.find_by_id(product_id))

    def search_products(self, query: str) -> List[Dict[str, Any]]:
        return to_jsonable(self.store.search(query))

    def get_stats(self) -> Dict[str, Any]:
        return self.store.aggregate_stats().to_response()

    # -------------------------------------------------------------------------
    # Writes (each evicts the cached listing once the store has acknowledged)
    # -------------------------------------------------------------------------

    def create_product(self, payload: Any) -> Dict[str, Any]:
        product = Product.from_payload(payload)
        inserted_id = self.store.insert_one(product.to_document())
        self.invalidate_listing()
        return {"acknowledged": True, "insertedId": inserted_id}

    def update_product(self, product_id: str, payload: Any) -> Dict[str, Any]:
        patch = Product.from_payload(payload).to_document()
        if not patch:
            raise ValidationFailureError("Update payload must contain at least one field")

        counts = self.store.update_one(product_id, patch)
        self.invalidate_listing()
        return {"acknowledged": True, **counts}

    def delete_product(self, product_id: str) -> Dict[str, Any]:
        deleted_count = self.store.delete_one(product_id)
        self.invalidate_listing()
        return {"acknowledged": True, "deletedCount": deleted_count}

    def populate(self, count: int = DEFAULT_POPULATE_COUNT) -> Dict[str, Any]:
        """Bulk insert `count` synthetic products."""
        if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_POPULATE_COUNT:
            raise ValidationFailureError(f"count must be an integer between 1 and {MAX_POPULATE_COUNT}")

        inserted_count = self.store.insert_many(ProductFactory.build_many(count))
        self.invalidate_listing()
        return {"message": "Database populated successfully", "insertedCount": inserted_count}

    # -------------------------------------------------------------------------
    # Cache maintenance
    # -------------------------------------------------------------------------

    def invalidate_listing(self) -> None:
        """
        Best-effort eviction of the cached listing. The mutation that
        triggered it has already committed, so a failure is only logged;
        the entry will expire on its TTL.
        """
        try:
            self.cache.delete(LISTING_CACHE_KEY)
        except CacheUnavailableError as e:
            logger.warning(f"Listing cache invalidation failed, entry expires in <= {self.ttl_seconds}s: {e}")

    def clear_cache(self) -> Dict[str, str]:
        """
        Explicit eviction. Unlike invalidate_listing this raises
        CacheUnavailableError, since eviction is the whole request.
        """
        self.cache.delete(LISTING_CACHE_KEY)
        return {"message": "Cache cleared successfully"}

    def _read_cached_listing(self):
        try:
            raw = self.cache.get(LISTING_CACHE_KEY)
        except CacheUnavailableError as e:
            logger.warning(f"Cache read failed, falling back to store: {e}")
            return None

        if raw is None:
            return None

        try:
            return loads_listing(raw)
        except ValueError as e:
            logger.warning(f"Discarding undecodable cached listing: {e}")
            return None
