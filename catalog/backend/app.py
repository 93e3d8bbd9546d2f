import atexit
import logging
import sys
import time
from typing import Optional

from flask import Flask, g, request

from backend.config import Settings
from backend.database.context import AppContext
from backend.factories.service_factory import ServiceFactory
from backend.modules.product.models.product_model import ProductModel
from shared.modules.cache.cache_store import CacheStore
from shared.modules.product.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ProductModel] = None,
    cache: Optional[CacheStore] = None,
) -> Flask:
    """
    Build the Flask app and its AppContext.

    The store must answer a ping before any route is registered; otherwise
    StoreUnavailableError is raised. An unreachable cache only logs a warning,
    the listing then always misses until Redis comes back.
    """
    settings = settings or Settings()
    app = Flask(__name__)

    context = ServiceFactory.create_app_context(app, settings, store=store, cache=cache)
    context.init_app(app)

    if not context.store.ping():
        context.close()
        raise StoreUnavailableError("Could not connect to MongoDB")
    context.store.ensure_indexes()

    if not context.cache.ping():
        logger.warning(f"Redis {settings.redis_host}:{settings.redis_port} unreachable, serving without cache")

    # Import and register blueprints after the context is initialized
    from backend.api.product_controller import bp as product_controller_bp
    from backend.api.health_controller import bp as health_controller_bp
    app.register_blueprint(product_controller_bp)
    app.register_blueprint(health_controller_bp)

    @app.before_request
    def start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def log_duration(response):
        started = g.get("start_time")
        if started is not None:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(f"{request.method} {request.path} - {duration_ms:.1f}ms")
        return response

    return app


def main():
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = create_app(settings)
    except StoreUnavailableError as e:
        logger.error(f"Failed to initialize application: {e}")
        sys.exit(1)

    atexit.register(app.extensions[AppContext.EXTENSION_KEY].close)

    logger.info("Server started")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  MongoDB: connected ({settings.mongo_db_name})")
    logger.info(f"  Redis: {settings.redis_host}:{settings.redis_port}")
    logger.info(f"  Cache TTL: {settings.cache_ttl_seconds} seconds")
    app.run(host="0.0.0.0", port=settings.port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
