import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "scaffolder"


def _now():
    return datetime.now(timezone.utc)


def connect(settings, client: Optional[MongoClient] = None) -> Database:
    """Open the store connection and verify it before anything is served.

    Raises pymongo.errors.PyMongoError if the server cannot be reached.
    """
    if client is None:
        client = MongoClient(settings.mongo_uri, serverSelectionTimeoutMS=5000, tz_aware=True)
    client.admin.command("ping")

    if settings.database_name:
        db = client[settings.database_name]
    else:
        db = client.get_default_database(default=DEFAULT_DATABASE_NAME)

    ensure_indexes(db)
    logger.info("Connected to MongoDB database %s", db.name)
    return db


def ensure_indexes(db: Database) -> None:
    db["user"].create_index([("email", ASCENDING)], unique=True)


def create_document(db: Database, collection_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document stamped with created_at/updated_at and return it with its _id."""
    doc = dict(data)
    now = _now()
    doc["created_at"] = now
    doc["updated_at"] = now
    inserted_id = db[collection_name].insert_one(doc).inserted_id
    doc["_id"] = inserted_id
    return doc


def to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
