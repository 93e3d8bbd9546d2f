import logging

from flask import Blueprint, request, jsonify

from backend.database.context import AppContext
from backend.modules.product.services.product_catalog_service import DEFAULT_POPULATE_COUNT
from shared.modules.product.errors import NotFoundError, ValidationFailureError

logger = logging.getLogger(__name__)

bp = Blueprint("product_controller", __name__)


def _server_error(action: str, e: Exception):
    logger.exception(f"Error {action}: {e}")
    return jsonify({"error": str(e)}), 500


@bp.route("/products", methods=["GET"])
def list_products():
    """
    All products straight from MongoDB, no cache.
    """
    try:
        return jsonify(AppContext.current().catalog.list_products()), 200
    except Exception as e:
        return _server_error("listing products", e)


@bp.route("/products-cached", methods=["GET"])
def list_products_cached():
    """
    All products through the Redis read-through cache.
    """
    try:
        return jsonify(AppContext.current().catalog.get_listing()), 200
    except Exception as e:
        return _server_error("listing cached products", e)


@bp.route("/products/search/<query>", methods=["GET"])
def search_products(query):
    """
    Case-insensitive substring search on name and description.
    """
    try:
        return jsonify(AppContext.current().catalog.search_products(query)), 200
    except Exception as e:
        return _server_error("searching products", e)


@bp.route("/products/<product_id>", methods=["GET"])
def get_product(product_id):
    try:
        product = AppContext.current().catalog.get_product(product_id)
        return jsonify(product), 200
    except NotFoundError:
        return jsonify({"error": "Product not found"}), 404
    except Exception as e:
        return _server_error("fetching product", e)


@bp.route("/products", methods=["POST"])
def create_product():
    """
    Insert one product. Accepts any JSON object; known fields are type-checked.

    product_payload = {
        "name": "Widget",
        "description": "A small widget",
        "price": 9.99,
        "category": "Electronics",
        "inStock": true
    }
    """
    try:
        payload = request.get_json(force=True, silent=True)
        result = AppContext.current().catalog.create_product(payload)
        return jsonify(result), 201
    except ValidationFailureError as e:
        return jsonify({"error": f"Validation error: {str(e)}"}), 400
    except Exception as e:
        return _server_error("creating product", e)


@bp.route("/products/<product_id>", methods=["PUT"])
def update_product(product_id):
    try:
        payload = request.get_json(force=True, silent=True)
        result = AppContext.current().catalog.update_product(product_id, payload)
        return jsonify(result), 200
    except ValidationFailureError as e:
        return jsonify({"error": f"Validation error: {str(e)}"}), 400
    except Exception as e:
        return _server_error("updating product", e)


@bp.route("/products/<product_id>", methods=["DELETE"])
def delete_product(product_id):
    try:
        result = AppContext.current().catalog.delete_product(product_id)
        return jsonify(result), 200
    except Exception as e:
        return _server_error("deleting product", e)


@bp.route("/stats", methods=["GET"])
def get_stats():
    """
    Product count, average/min/max price and per-category counts.
    """
    try:
        return jsonify(AppContext.current().catalog.get_stats()), 200
    except Exception as e:
        return _server_error("computing stats", e)


@bp.route("/populate", methods=["POST"])
def populate():
    """
    Bulk insert synthetic products (1000 unless the body says {"count": n}).
    """
    try:
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict):
            payload = {}
        count = payload.get("count", DEFAULT_POPULATE_COUNT)
        result = AppContext.current().catalog.populate(count)
        return jsonify(result), 200
    except ValidationFailureError as e:
        return jsonify({"error": f"Validation error: {str(e)}"}), 400
    except Exception as e:
        return _server_error("populating products", e)


@bp.route("/clear-cache", methods=["POST"])
def clear_cache():
    try:
        return jsonify(AppContext.current().catalog.clear_cache()), 200
    except Exception as e:
        return _server_error("clearing cache", e)
