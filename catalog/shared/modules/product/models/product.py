from __future__ import annotations
from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ValidationFailureError


class Product(BaseModel):
    """
    Semi-structured product record.

    Known attributes are typed but optional; anything else the caller sends
    is kept as an extension field and stored as-is, so the collection stays
    schema-less.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    in_stock: Optional[bool] = Field(default=None, alias="inStock")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_payload(cls, payload: Any) -> "Product":
        """
        Validate a request body. Raises ValidationFailureError for anything
        that is not a JSON object or has a wrongly typed known field.
        The store owns `_id`, so a client supplied one is ignored.
        """
        if not isinstance(payload, dict):
            raise ValidationFailureError("Product payload must be a JSON object")

        data = {k: v for k, v in payload.items() if k != "_id"}
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ValidationFailureError(str(e)) from e

    def to_document(self) -> Dict[str, Any]:
        """Only the fields the caller actually supplied, under their stored names."""
        doc = self.model_dump(by_alias=True, exclude_unset=True)
        doc.update(self.model_extra or {})
        return doc


class ProductStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    count: int = 0
    avg_price: Optional[float] = Field(default=None, alias="avgPrice")
    min_price: Optional[float] = Field(default=None, alias="minPrice")
    max_price: Optional[float] = Field(default=None, alias="maxPrice")
    category_breakdown: Dict[str, int] = Field(default_factory=dict, alias="categoryBreakdown")

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
