from flask import Blueprint, jsonify

from backend.database.context import AppContext

bp = Blueprint("health_controller", __name__)


@bp.route("/health", methods=["GET"])
def health():
    """
    Connectivity of MongoDB and Redis plus process uptime.
    A Redis outage only degrades the service; a MongoDB outage is a failure.
    """
    context = AppContext.current()
    mongo_ok = context.store.ping()
    redis_ok = context.cache.ping()

    if mongo_ok and redis_ok:
        status = "ok"
    elif mongo_ok:
        status = "degraded"
    else:
        status = "unavailable"

    body = {
        "mongodb": "connected" if mongo_ok else "disconnected",
        "redis": "connected" if redis_ok else "disconnected",
        "status": status,
        "uptime": context.uptime(),
    }
    return jsonify(body), 200 if mongo_ok else 500
