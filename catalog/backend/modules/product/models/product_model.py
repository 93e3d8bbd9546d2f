import re
from typing import Any, Dict, List

import pymongo

from backend.models.base_nosql_model import BaseNoSqlModel
from shared.modules.product.models.product import ProductStats

UNCATEGORIZED = "uncategorized"

# Non-numeric prices (schema-less inserts) become null, which $min/$max skip.
# $avg already ignores them.
NUMERIC_PRICE = {"$cond": [{"$isNumber": "$price"}, "$price", None]}


class ProductModel(BaseNoSqlModel):
    """
    MongoDB persistence wrapper for the products collection.
    Inherits common CRUD operations from BaseNoSqlModel.
    """

    collection_name = "products"

    def ensure_indexes(self) -> None:
        """Create the lookup indexes used by search and stats."""
        with self.store_errors("create_index"):
            for field in ("name", "price", "category"):
                self.collection.create_index([(field, pymongo.ASCENDING)])

    def search(self, query: str) -> List[Dict[str, Any]]:
        """
        Case-insensitive substring match against name or description.
        The query is matched literally.
        """
        pattern = {"$regex": re.escape(query), "$options": "i"}
        with self.store_errors("search"):
            return list(self.collection.find({
                "$or": [
                    {"name": pattern},
                    {"description": pattern},
                ]
            }))

    def aggregate_stats(self) -> ProductStats:
        """
        Count, price summary and per-category product counts.
        An empty collection yields count 0 and null prices.
        """
        pipeline = [
            {
                "$facet": {
                    "summary": [
                        {
                            "$group": {
                                "_id": None,
                                "count": {"$sum": 1},
                                "avgPrice": {"$avg": "$price"},
                                "minPrice": {"$min": NUMERIC_PRICE},
                                "maxPrice": {"$max": NUMERIC_PRICE},
                            }
                        }
                    ],
                    "categories": [
                        {"$group": {"_id": "$category", "count": {"$sum": 1}}},
                        {"$sort": {"_id": 1}},
                    ],
                }
            }
        ]
        with self.store_errors("aggregate"):
            results = list(self.collection.aggregate(pipeline))

        return self._stats_from_facets(results[0] if results else {})

    @staticmethod
    def _stats_from_facets(facets: Dict[str, Any]) -> ProductStats:
        summary = (facets.get("summary") or [{}])[0]
        breakdown = {}
        for entry in facets.get("categories") or []:
            label = entry.get("_id")
            key = UNCATEGORIZED if label is None else str(label)
            breakdown[key] = breakdown.get(key, 0) + entry.get("count", 0)

        return ProductStats(
            count=summary.get("count", 0),
            avgPrice=_number(summary.get("avgPrice")),
            minPrice=_number(summary.get("minPrice")),
            maxPrice=_number(summary.get("maxPrice")),
            categoryBreakdown=breakdown,
        )


def _number(value: Any):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value
