"""
Application context for the Flask app.
Built once at startup and stored on the app, so handlers and background
code get the shared connections without module-level globals.
"""
import logging
import time
from typing import Optional

from flask import Flask, current_app
from pymongo import MongoClient
from pymongo.database import Database

from backend.config import Settings
from backend.modules.product.models.product_model import ProductModel
from backend.modules.product.services.product_catalog_service import ProductCatalogService
from shared.modules.cache.cache_store import CacheStore

logger = logging.getLogger(__name__)


class AppContext:
    """
    Holds the process-wide store and cache handles plus the services built on them.
    """

    EXTENSION_KEY = "catalog"

    def __init__(
        self,
        settings: Settings,
        store: ProductModel,
        cache: CacheStore,
        catalog: ProductCatalogService,
        mongo_db: Optional[Database] = None,
        mongo_client: Optional[MongoClient] = None,
    ):
        self.settings = settings
        self.store = store
        self.cache = cache
        self.catalog = catalog
        self.mongo_db = mongo_db
        self.mongo_client = mongo_client
        self.started_at = time.monotonic()

    def init_app(self, app: Flask) -> None:
        app.extensions[self.EXTENSION_KEY] = self

    @classmethod
    def current(cls) -> "AppContext":
        """
        Get the context of the running app.
        Works in both request context and application context.
        """
        return current_app.extensions[cls.EXTENSION_KEY]

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def close(self) -> None:
        """Release the cache and store connections."""
        logger.info("Closing connections...")
        self.cache.close()
        if self.mongo_client is not None:
            self.mongo_client.close()
        logger.info("Connections closed")
