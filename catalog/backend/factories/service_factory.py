"""
Service Factory for creating the store, cache and catalog service with proper dependencies.
"""
from typing import Optional

from flask import Flask
from flask_pymongo import PyMongo

from backend.config import Settings
from backend.database.context import AppContext
from backend.modules.product.models.product_model import ProductModel
from backend.modules.product.services.product_catalog_service import ProductCatalogService
from shared.modules.cache.cache_store import CacheStore
from shared.modules.cache.redis_cache_store import RedisCacheStore


class ServiceFactory:
    """
    Factory for creating service instances with injected dependencies.
    Anything passed in explicitly is used as-is; the rest is built from settings.
    """

    @staticmethod
    def create_cache_store(settings: Settings) -> CacheStore:
        return RedisCacheStore(
            host=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password,
            socket_timeout=settings.redis_socket_timeout,
            max_retries=settings.redis_max_retries,
        )

    @staticmethod
    def create_app_context(
        app: Flask,
        settings: Settings,
        store: Optional[ProductModel] = None,
        cache: Optional[CacheStore] = None,
    ) -> AppContext:
        """
        Create the AppContext for `app`.

        Without an injected store this opens the MongoDB connection pool
        through Flask-PyMongo. The client connects lazily; callers should
        ping before serving.
        """
        mongo_db = None
        mongo_client = None
        if store is None:
            app.config["MONGO_URI"] = settings.mongo_uri
            mongo = PyMongo(
                app,
                maxPoolSize=settings.mongo_max_pool_size,
                serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
                socketTimeoutMS=settings.mongo_socket_timeout_ms,
                retryWrites=True,
                w="majority",
            )
            mongo_client = mongo.cx
            mongo_db = mongo_client[settings.mongo_db_name]
            store = ProductModel(mongo_db)

        if cache is None:
            cache = ServiceFactory.create_cache_store(settings)

        catalog = ProductCatalogService(store, cache, ttl_seconds=settings.cache_ttl_seconds)
        return AppContext(
            settings=settings,
            store=store,
            cache=cache,
            catalog=catalog,
            mongo_db=mongo_db,
            mongo_client=mongo_client,
        )
