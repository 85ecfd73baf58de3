from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

import config
import database
from auth import authenticate, get_current_user, register_user, user_to_public
from communities import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    ListingQuery,
    create_community,
    featured_communities,
    get_community,
    list_communities,
)
from database import get_db
from errors import register_exception_handlers
from logging_config import get_logger, setup_logging
from matchmaker import to_listing_query
from memberships import join_community, leave_community, my_communities, save_community, unsave_community
from schemas import CommunitySubmission, LoginBody, MatchAnswers, SignUpBody, TokenResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if database.db is not None:
        database.ensure_indexes(database.db)
    else:
        logger.warning("database_not_configured")
    logger.info("app_started", environment=config.ENVIRONMENT)
    yield


# App setup
app = FastAPI(title="DevLinker API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_origin_regex=config.ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["Content-Range", "X-Content-Range"],
)

register_exception_handlers(app)


# Auth Endpoints
@app.post("/api/auth/signup", response_model=TokenResponse)
def signup(body: SignUpBody, db: Database = Depends(get_db)):
    return register_user(db, body)


@app.post("/api/auth/login", response_model=TokenResponse)
def login(body: LoginBody, db: Database = Depends(get_db)):
    return authenticate(db, body.email, body.password)


@app.get("/api/auth/me")
def me(current=Depends(get_current_user)):
    return {"success": True, "data": user_to_public(current)}


# Communities Endpoints
@app.get("/api/communities")
def get_communities(
    search: Optional[str] = None,
    tech_stack: Optional[str] = None,
    platform: Optional[str] = None,
    location_mode: Optional[str] = None,
    activity_level: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    db: Database = Depends(get_db),
):
    listing = ListingQuery(
        search=search,
        tech_stack=tech_stack,
        platform=platform,
        location_mode=location_mode,
        activity_level=activity_level,
        page=page,
        limit=limit,
    )
    return list_communities(db["community"], listing)


@app.get("/api/communities/featured/list")
def get_featured(db: Database = Depends(get_db)):
    return featured_communities(db["community"])


@app.get("/api/communities/{community_id}")
def get_community_detail(community_id: str, db: Database = Depends(get_db)):
    return get_community(db["community"], community_id)


@app.post("/api/communities", status_code=status.HTTP_201_CREATED)
def post_community(body: CommunitySubmission, current=Depends(get_current_user), db: Database = Depends(get_db)):
    community = create_community(db["community"], body)
    return {"success": True, "message": "Community created successfully", "data": community}


# User relationship Endpoints
@app.get("/api/users/me/communities")
def get_my_communities(current=Depends(get_current_user), db: Database = Depends(get_db)):
    return my_communities(db, current)


@app.post("/api/users/communities/{community_id}/join", status_code=status.HTTP_201_CREATED)
def join(community_id: str, current=Depends(get_current_user), db: Database = Depends(get_db)):
    return join_community(db, current, community_id)


@app.delete("/api/users/communities/{community_id}/join")
def leave(community_id: str, current=Depends(get_current_user), db: Database = Depends(get_db)):
    return leave_community(db, current, community_id)


@app.post("/api/users/communities/{community_id}/save")
def save(community_id: str, current=Depends(get_current_user), db: Database = Depends(get_db)):
    return save_community(db, current, community_id)


@app.delete("/api/users/communities/{community_id}/save")
def unsave(community_id: str, current=Depends(get_current_user), db: Database = Depends(get_db)):
    return unsave_community(db, current, community_id)


# Match Maker
@app.post("/api/match")
def match(answers: MatchAnswers, db: Database = Depends(get_db)):
    return list_communities(db["community"], to_listing_query(answers))


@app.get("/")
def read_root():
    return {"message": "DevLinker API is running"}


@app.get("/api/health")
def health():
    return {"status": "OK", "message": "DevLinker API is running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    db = database.db
    if db is not None:
        response["database"] = "✅ Available"
        response["connection_status"] = "Connected"
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            logger.warning("database_check_failed", error=str(e))
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"

    response["database_url"] = "✅ Set" if config.DATABASE_URL else "❌ Not Set"
    response["database_name"] = config.DATABASE_NAME
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
