"""
Synthetic product generator used to bulk-populate the catalog.
"""
import random
from datetime import datetime
from typing import Any, Dict, List, Optional

from .enums.product_category_enum import ProductCategory


class ProductFactory:

    @staticmethod
    def build(index: int, rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        rng = rng or random
        return {
            "name": f"Product {index}",
            "description": f"Description for product {index}",
            "price": rng.random() * 1000,
            "category": rng.choice(list(ProductCategory)).value,
            "inStock": rng.random() > 0.5,
            "createdAt": now or datetime.utcnow(),
        }

    @classmethod
    def build_many(cls, count: int, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
        """Build `count` test products sharing one createdAt timestamp."""
        now = datetime.utcnow()
        return [cls.build(i, rng=rng, now=now) for i in range(count)]
