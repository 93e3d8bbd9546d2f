"""
Base model class for MongoDB operations.
The database handle is passed in explicitly; subclasses name their collection.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from shared.modules.product.errors import NotFoundError, StoreUnavailableError


class BaseNoSqlModel:
    """
    Base class for MongoDB models with the common CRUD operations.

    Every driver failure is re-raised as StoreUnavailableError so callers only
    deal with the catalog's own error kinds.
    """

    collection_name: str = ""

    def __init__(self, mongo_db: Database):
        self.db = mongo_db

    @property
    def collection(self) -> Collection:
        """
        Get the MongoDB collection for this model.
        Override `collection_name` in subclasses.
        """
        if not self.collection_name:
            raise NotImplementedError("Subclasses must set collection_name")
        return self.db[self.collection_name]

    @staticmethod
    def resolve_id(doc_id: str) -> Union[ObjectId, str]:
        """
        Store-assigned ids are ObjectIds; anything that isn't a valid
        ObjectId is looked up as a plain string _id.
        """
        if ObjectId.is_valid(doc_id):
            return ObjectId(doc_id)
        return doc_id

    @contextmanager
    def store_errors(self, operation: str):
        try:
            yield
        except PyMongoError as e:
            raise StoreUnavailableError(f"{operation} failed: {e}") from e

    # -------------------------------------------------------------------------
    # Common CRUD operations
    # -------------------------------------------------------------------------

    def find_all(self) -> List[Dict[str, Any]]:
        with self.store_errors("find"):
            return list(self.collection.find({}))

    def find_by_id(self, doc_id: str) -> Dict[str, Any]:
        """
        Find a raw document by its ID. Raises NotFoundError when absent.
        """
        with self.store_errors("find_one"):
            doc = self.collection.find_one({"_id": self.resolve_id(doc_id)})
        if doc is None:
            raise NotFoundError(doc_id)
        return doc

    def insert_one(self, doc: Dict[str, Any]) -> str:
        """
        Insert a document and return its id as a string.
        Sets createdAt automatically.
        """
        doc = dict(doc)
        if doc.get("createdAt") is None:
            doc["createdAt"] = datetime.utcnow()

        with self.store_errors("insert_one"):
            result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def insert_many(self, docs: List[Dict[str, Any]]) -> int:
        with self.store_errors("insert_many"):
            result = self.collection.insert_many(docs)
        return len(result.inserted_ids)

    def update_one(self, doc_id: str, patch: Dict[str, Any]) -> Dict[str, int]:
        """
        Apply a $set patch to one document. Sets updatedAt automatically.
        """
        fields = dict(patch)
        fields["updatedAt"] = datetime.utcnow()

        with self.store_errors("update_one"):
            result = self.collection.update_one(
                {"_id": self.resolve_id(doc_id)},
                {"$set": fields}
            )
        return {"matchedCount": result.matched_count, "modifiedCount": result.modified_count}

    def delete_one(self, doc_id: str) -> int:
        with self.store_errors("delete_one"):
            result = self.collection.delete_one({"_id": self.resolve_id(doc_id)})
        return result.deleted_count

    def ping(self) -> bool:
        """True when the server answers the ping command."""
        try:
            reply = self.db.command("ping")
        except PyMongoError:
            return False
        return float(reply.get("ok", 0)) == 1.0
