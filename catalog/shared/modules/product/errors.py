"""
Error kinds raised by the product catalog store and cache adapters.
Controllers map these to HTTP status codes.
"""


class CatalogError(Exception):
    """Base class for catalog failures."""


class NotFoundError(CatalogError):
    """Lookup by id yielded no document."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class StoreUnavailableError(CatalogError):
    """Connection, timeout or query failure against the document store."""


class CacheUnavailableError(CatalogError):
    """Connection or timeout failure against the cache store."""


class ValidationFailureError(CatalogError, ValueError):
    """Malformed mutation payload."""
