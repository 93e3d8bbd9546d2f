"""
JSON conversion for product documents.

Both the HTTP responses and the cached listing go through these helpers, so a
cache hit returns exactly what a direct store read would.
"""
import json
from datetime import datetime
from typing import Any, Dict, List

from bson import ObjectId


def to_jsonable(value: Any) -> Any:
    """
    Recursively convert BSON values to JSON-safe ones.
    ObjectId -> hex string, datetime -> ISO-8601 string.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def dumps_listing(products: List[Dict[str, Any]]) -> str:
    return json.dumps(to_jsonable(products))


def loads_listing(raw: str) -> List[Dict[str, Any]]:
    """Raises ValueError when the cached payload is not a JSON array."""
    listing = json.loads(raw)
    if not isinstance(listing, list):
        raise ValueError("Cached listing is not a JSON array")
    return listing
