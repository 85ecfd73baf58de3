import math
import re
from typing import Any, Dict, List, Optional, Sequence, Union

from bson import ObjectId
from pydantic import AnyUrl, BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from database import create_document, to_public, to_public_list
from errors import NotFound, ValidationFailed, field_error
from logging_config import get_logger
from schemas import (
    ACTIVITY_LEVELS,
    DEFAULT_ACTIVITY_LEVEL,
    LOCATION_MODES,
    PLATFORMS,
    Community,
    CommunitySubmission,
)

logger = get_logger(__name__)

COLLECTION = "community"
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
RELATED_LIMIT = 3
FEATURED_LIMIT = 6

LISTING_SORT = [("member_count", DESCENDING), ("created_at", DESCENDING)]

REQUIRED_FIELDS = {
    "title": "Title",
    "description": "Description",
    "tech_stack": "Tech stack",
    "platform": "Platform",
    "location_mode": "Location mode",
    "joining_link": "Joining link",
}

_REGEX_SPECIALS = re.compile(r"[.*+?^${}()|\[\]\\]")
_url_adapter = TypeAdapter(AnyUrl)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ListingQuery(BaseModel):
    search: Optional[str] = None
    tech_stack: Union[str, List[str], None] = None
    platform: Optional[str] = None
    location_mode: Optional[str] = None
    activity_level: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)


def escape_regex(value: str) -> str:
    return _REGEX_SPECIALS.sub(lambda m: "\\" + m.group(0), value)


def _partial(value: str) -> Dict[str, str]:
    return {"$regex": escape_regex(value), "$options": "i"}


def build_filter(
    search: Optional[str] = None,
    tech_stack: Union[str, Sequence[str], None] = None,
    platform: Optional[str] = None,
    location_mode: Optional[str] = None,
    activity_level: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the Mongo predicate for the listing endpoint.

    ``search`` is a case-insensitive partial match on title, description or
    any tag. ``tech_stack`` is a case-insensitive partial match; a sequence of
    stacks matches any of them. The remaining filters are exact matches.
    Blank values are ignored.
    """
    query: Dict[str, Any] = {}

    if search and search.strip():
        pattern = _partial(search.strip())
        query["$or"] = [
            {"title": pattern},
            {"description": pattern},
            {"tags": pattern},
        ]

    if isinstance(tech_stack, str):
        tech_stack = [tech_stack]
    stacks = [s.strip() for s in (tech_stack or []) if s and s.strip()]
    if stacks:
        query["tech_stack"] = {"$regex": "|".join(escape_regex(s) for s in stacks), "$options": "i"}

    for field, value in (
        ("platform", platform),
        ("location_mode", location_mode),
        ("activity_level", activity_level),
    ):
        if value:
            query[field] = value

    return query


def list_communities(collection: Collection, listing: ListingQuery) -> Dict[str, Any]:
    query = build_filter(
        search=listing.search,
        tech_stack=listing.tech_stack,
        platform=listing.platform,
        location_mode=listing.location_mode,
        activity_level=listing.activity_level,
    )
    skip = (listing.page - 1) * listing.limit

    docs = list(collection.find(query).sort(LISTING_SORT).skip(skip).limit(listing.limit))
    total = collection.count_documents(query)

    return {
        "success": True,
        "count": len(docs),
        "total": total,
        "page": listing.page,
        "pages": math.ceil(total / listing.limit),
        "data": to_public_list(docs),
    }


def find_community(collection: Collection, community_id: str) -> Optional[Dict[str, Any]]:
    # A malformed id raises bson.errors.InvalidId; callers let it surface as a server error.
    return collection.find_one({"_id": ObjectId(community_id)})


def find_related(collection: Collection, community: Dict[str, Any], limit: int = RELATED_LIMIT) -> List[Dict[str, Any]]:
    query = {
        "_id": {"$ne": community["_id"]},
        "$or": [
            {"tech_stack": community.get("tech_stack")},
            {"tags": {"$in": list(community.get("tags") or [])}},
        ],
    }
    return list(collection.find(query).sort("_id", ASCENDING).limit(limit))


def get_community(collection: Collection, community_id: str) -> Dict[str, Any]:
    community = find_community(collection, community_id)
    if community is None:
        raise NotFound("Community not found")

    related = find_related(collection, community)
    return {"success": True, "data": to_public(community), "related": to_public_list(related)}


def featured_communities(collection: Collection, limit: int = FEATURED_LIMIT) -> Dict[str, Any]:
    docs = collection.find().sort([("member_count", DESCENDING), ("activity_level", DESCENDING)]).limit(limit)
    return {"success": True, "data": to_public_list(docs)}


# Creation

def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_tags(tags: Union[List[str], str, None]) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [t.strip() for t in tags if isinstance(t, str) and t.strip()]


def parse_member_count(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        # Leading digits only: "1,200" -> 1, "12abc" -> 12
        match = _LEADING_INT.match(value)
        return max(int(match.group(1)), 0) if match else 0
    try:
        count = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(count, 0)


def normalize_submission(submission: CommunitySubmission) -> Dict[str, Any]:
    """Turn a loose submission into the strict shape stored in Mongo.

    Strings are trimmed, tags accept a list or a comma-separated string,
    member_count falls back to 0 and activity_level to Medium.
    """
    activity_level = _clean(submission.activity_level)
    if activity_level not in ACTIVITY_LEVELS:
        activity_level = DEFAULT_ACTIVITY_LEVEL

    return {
        "title": _clean(submission.title),
        "description": _clean(submission.description),
        "full_description": _clean(submission.full_description),
        "tech_stack": _clean(submission.tech_stack),
        "platform": _clean(submission.platform),
        "location_mode": _clean(submission.location_mode),
        "tags": normalize_tags(submission.tags),
        "joining_link": _clean(submission.joining_link),
        "community_page": _clean(submission.community_page),
        "logo_url": _clean(submission.logo_url),
        "member_count": parse_member_count(submission.member_count),
        "activity_level": activity_level,
        "rules": _clean(submission.rules),
    }


def is_valid_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def validate_community(data: Dict[str, Any]) -> Community:
    missing = [field_error(f, f"{label} is required") for f, label in REQUIRED_FIELDS.items() if not data.get(f)]
    if missing:
        raise ValidationFailed(errors=missing)

    if not is_valid_url(data["joining_link"]):
        raise ValidationFailed("Invalid joining link URL format", [field_error("joining_link", "Invalid URL")])

    errors = []
    if data["platform"] not in PLATFORMS:
        errors.append(field_error("platform", f"Platform must be one of: {', '.join(PLATFORMS)}"))
    if data["location_mode"] not in LOCATION_MODES:
        errors.append(field_error("location_mode", f"Location mode must be one of: {', '.join(LOCATION_MODES)}"))
    if errors:
        raise ValidationFailed(errors=errors)

    return Community(**data)


def create_community(collection: Collection, submission: CommunitySubmission) -> Dict[str, Any]:
    community = validate_community(normalize_submission(submission))
    doc = create_document(collection.database, collection.name, community.model_dump())
    logger.info("community_created", community_id=str(doc["_id"]), title=community.title)
    return to_public(doc)
