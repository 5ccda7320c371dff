"""
MongoDB access for the back-office.

One ``Database`` is built when the application starts and shared by every
request handler through the ``get_db`` dependency. Collection helpers follow
the usual shape: ``create_document`` stamps timestamps and returns the new id
as a string, ``get_documents`` returns plain dicts.
"""
import logging
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument

from security import hash_password

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

# Keys that never leave the API
HIDDEN_FIELDS = ("__v", "password", "password_hash")


def _as_dict(data: Any) -> Dict[str, Any]:
    if hasattr(data, "model_dump"):
        return data.model_dump()
    return dict(data)


def _hash_plaintext_password(data: Dict[str, Any]) -> Dict[str, Any]:
    password = data.pop("password", None)
    if password:
        data["password_hash"] = hash_password(password)
    return data


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return ``value`` as an ObjectId, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def build_filter(q: Optional[str] = None, search_fields: Iterable[str] = (), **exact) -> dict:
    """Case-insensitive substring search over ``search_fields`` plus exact matches."""
    filt = {k: v for k, v in exact.items() if v is not None}
    if q:
        pattern = {"$regex": re.escape(q), "$options": "i"}
        filt["$or"] = [{field: pattern} for field in search_fields]
    return filt


def serialize_doc(doc):
    if not doc:
        return doc
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    for key in HIDDEN_FIELDS:
        doc.pop(key, None)
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
        elif isinstance(v, datetime):
            doc[k] = v.isoformat()
        elif isinstance(v, list):
            doc[k] = [serialize_doc(i) if isinstance(i, dict) else i for i in v]
        elif isinstance(v, dict):
            doc[k] = serialize_doc(v)
    return doc


class Database:
    def __init__(self, client: MongoClient, name: str):
        self.client = client
        self.name = name
        self.db = client[name]

    @classmethod
    def from_env(cls) -> "Database":
        if not DATABASE_URL or not DATABASE_NAME:
            raise RuntimeError("DATABASE_URL and DATABASE_NAME must be set")
        logger.info("Connecting to MongoDB database %s", DATABASE_NAME)
        return cls(MongoClient(DATABASE_URL), DATABASE_NAME)

    def __getitem__(self, collection_name: str):
        return self.db[collection_name]

    def list_collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    def ensure_indexes(self) -> None:
        self.db["user"].create_index([("email", ASCENDING)], unique=True)
        self.db["user"].create_index([("role", ASCENDING)])
        self.db["user"].create_index([("is_active", ASCENDING)])
        for collection_name in ("user", "article", "post", "request"):
            self.db[collection_name].create_index([("created_at", DESCENDING)])
        self.db["history"].create_index([("date", DESCENDING)])

    def close(self) -> None:
        self.client.close()

    # Collection helpers
    def create_document(self, collection_name: str, data: Any) -> str:
        data_dict = _hash_plaintext_password(_as_dict(data))
        now = datetime.now(timezone.utc)
        data_dict["created_at"] = now
        data_dict["updated_at"] = now
        result = self.db[collection_name].insert_one(data_dict)
        return str(result.inserted_id)

    def get_documents(self, collection_name: str, filter_dict: Optional[dict] = None,
                      sort_field: str = "created_at", limit: Optional[int] = None) -> List[dict]:
        cursor = self.db[collection_name].find(filter_dict or {}).sort(sort_field, DESCENDING)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def get_document(self, collection_name: str, doc_id: ObjectId) -> Optional[dict]:
        return self.db[collection_name].find_one({"_id": doc_id})

    def update_document(self, collection_name: str, doc_id: ObjectId, data: Any) -> Optional[dict]:
        """Replace the given fields and return the updated document, or None when absent."""
        data_dict = _hash_plaintext_password(_as_dict(data))
        data_dict["updated_at"] = datetime.now(timezone.utc)
        return self.db[collection_name].find_one_and_update(
            {"_id": doc_id},
            {"$set": data_dict},
            return_document=ReturnDocument.AFTER,
        )

    def delete_document(self, collection_name: str, doc_id: ObjectId) -> bool:
        result = self.db[collection_name].delete_one({"_id": doc_id})
        return result.deleted_count > 0

    # References
    def populate(self, docs: List[dict], field: str, target: str, collection_name: str,
                 fields: Iterable[str]) -> List[dict]:
        """
        Expand ``doc[field]`` into ``doc[target]`` for each serialized doc.

        References are fetched with a single ``$in`` query. A reference whose
        target is missing expands to None and the raw id in ``field`` is kept.
        """
        fields = list(fields)
        ids = {parse_object_id(doc.get(field)) for doc in docs}
        ids.discard(None)
        found = {}
        if ids:
            cursor = self.db[collection_name].find({"_id": {"$in": list(ids)}}, {f: 1 for f in fields})
            found = {str(ref["_id"]): serialize_doc(ref) for ref in cursor}
        for doc in docs:
            ref_id = doc.get(field)
            doc[target] = found.get(str(ref_id)) if ref_id else None
        return docs
