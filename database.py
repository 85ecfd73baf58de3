"""
MongoDB access for DevLinker.

`db` is None when no connection string is configured; request handlers get the
database through the `get_db` dependency so tests can swap it out.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from pymongo import ASCENDING, DESCENDING, TEXT, MongoClient
from pymongo.database import Database

import config
from logging_config import get_logger

logger = get_logger(__name__)

client: Optional[MongoClient] = None
db: Optional[Database] = None

if config.DATABASE_URL:
    client = MongoClient(config.DATABASE_URL)
    db = client[config.DATABASE_NAME]


def get_db() -> Database:
    if db is None:
        raise HTTPException(500, "Database not configured")
    return db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def stamp(data: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    return {**data, "created_at": now, "updated_at": now}


def create_document(database: Database, collection_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
    doc = stamp(data)
    doc["_id"] = database[collection_name].insert_one(doc).inserted_id
    return doc


def to_public(doc: Optional[Dict[str, Any]], hidden: tuple = ()) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = {**doc}
    doc["id"] = str(doc.get("_id")) if doc.get("_id") else None
    doc.pop("_id", None)
    for key in hidden:
        doc.pop(key, None)
    return doc


def to_public_list(docs) -> List[Dict[str, Any]]:
    return [to_public(d) for d in docs]


def ensure_indexes(database: Database) -> None:
    communities = database["community"]
    communities.create_index([("title", TEXT), ("description", TEXT), ("tags", TEXT)])
    for field in ("tech_stack", "platform", "location_mode", "activity_level"):
        communities.create_index([(field, ASCENDING)])
    communities.create_index([("member_count", DESCENDING), ("created_at", DESCENDING)])

    database["user"].create_index([("email", ASCENDING)], unique=True)
    database["membership"].create_index([("user_id", ASCENDING), ("community_id", ASCENDING)], unique=True)
    logger.info("indexes_ensured", database=database.name)
