from typing import Any, Dict, List

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database

from communities import find_community
from database import to_public_list, utcnow
from errors import BadRequest, NotFound
from logging_config import get_logger
from schemas import Membership

logger = get_logger(__name__)


def _require_community(db: Database, community_id: str) -> Dict[str, Any]:
    community = find_community(db["community"], community_id)
    if community is None:
        raise NotFound("Community not found")
    return community


def _user_id(user: Dict[str, Any]) -> str:
    return str(user["_id"])


def _community_key(community_id: str) -> str:
    # Stored ids are lowercase hex, as produced by str(ObjectId)
    return str(ObjectId(community_id)) if ObjectId.is_valid(community_id) else community_id


def join_community(db: Database, user: Dict[str, Any], community_id: str) -> Dict[str, Any]:
    community = _require_community(db, community_id)
    key = {"user_id": _user_id(user), "community_id": str(community["_id"])}
    if db["membership"].find_one(key):
        raise BadRequest("Already joined this community")

    record = Membership(**key, joined_at=utcnow()).model_dump()
    db["membership"].insert_one(record)
    logger.info("community_joined", **key)
    return {"success": True, "message": "Joined community successfully"}


def leave_community(db: Database, user: Dict[str, Any], community_id: str) -> Dict[str, Any]:
    key = {"user_id": _user_id(user), "community_id": _community_key(community_id)}
    res = db["membership"].delete_one(key)
    if res.deleted_count == 0:
        raise BadRequest("Not a member of this community")
    logger.info("community_left", **key)
    return {"success": True, "message": "Left community successfully"}


def save_community(db: Database, user: Dict[str, Any], community_id: str) -> Dict[str, Any]:
    community = _require_community(db, community_id)
    db["user"].update_one({"_id": user["_id"]}, {"$addToSet": {"saved_communities": str(community["_id"])}})
    return {"success": True, "message": "Community saved"}


def unsave_community(db: Database, user: Dict[str, Any], community_id: str) -> Dict[str, Any]:
    db["user"].update_one({"_id": user["_id"]}, {"$pull": {"saved_communities": _community_key(community_id)}})
    return {"success": True, "message": "Community removed from saved"}


def _communities_in_order(db: Database, ids: List[str]) -> List[Dict[str, Any]]:
    object_ids = [ObjectId(i) for i in ids if ObjectId.is_valid(i)]
    by_id = {str(c["_id"]): c for c in db["community"].find({"_id": {"$in": object_ids}})}
    # Communities that no longer exist are skipped
    return [by_id[i] for i in ids if i in by_id]


def my_communities(db: Database, user: Dict[str, Any]) -> Dict[str, Any]:
    records = db["membership"].find({"user_id": _user_id(user)}).sort("joined_at", DESCENDING)
    joined_ids = [r["community_id"] for r in records]

    fresh = db["user"].find_one({"_id": user["_id"]}) or user
    saved_ids = list(fresh.get("saved_communities") or [])

    return {
        "success": True,
        "joined": to_public_list(_communities_in_order(db, joined_ids)),
        "saved": to_public_list(_communities_in_order(db, saved_ids)),
    }
