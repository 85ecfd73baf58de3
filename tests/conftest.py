# tests/conftest.py
import os
from itertools import count
from typing import Any, Callable, Dict, Iterator

import mongomock
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Never talk to a real server from the test suite.
os.environ["DATABASE_URL"] = ""
os.environ["MONGODB_URI"] = ""

from auth import create_access_token, hash_password  # noqa: E402
from database import create_document, get_db  # noqa: E402
from main import app as fastapi_app  # noqa: E402
from schemas import User  # noqa: E402

_COMMUNITY_COUNTER = count(1)


@pytest.fixture()
def mongo():
    return mongomock.MongoClient()["devlinker_test"]


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_db(app: FastAPI, mongo) -> Iterator[None]:
    app.dependency_overrides[get_db] = lambda: mongo
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def raw_client(app: FastAPI) -> Iterator[TestClient]:
    """Client that returns 500 responses instead of re-raising server errors."""
    with TestClient(app, base_url="http://test", raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture()
def user(mongo) -> Dict[str, Any]:
    doc = User(name="Ada", email="ada@devlinker.dev", password=hash_password("secret123")).model_dump()
    doc["_id"] = mongo["user"].insert_one(doc).inserted_id
    return doc


@pytest.fixture()
def auth_headers(user) -> Dict[str, str]:
    token = create_access_token({"sub": str(user["_id"]), "email": user["email"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_community(mongo) -> Callable[..., Dict[str, Any]]:
    def _make(**overrides: Any) -> Dict[str, Any]:
        n = next(_COMMUNITY_COUNTER)
        data = {
            "title": f"Community {n}",
            "description": "A place for developers",
            "full_description": "",
            "tech_stack": "General",
            "platform": "Discord",
            "location_mode": "Global/Online",
            "tags": [],
            "community_page": "",
            "joining_link": f"https://discord.gg/c{n}",
            "logo_url": "",
            "member_count": 0,
            "activity_level": "Medium",
            "rules": "",
        }
        data.update(overrides)
        return create_document(mongo, "community", data)

    return _make


@pytest.fixture()
def submission() -> Dict[str, Any]:
    return {
        "title": "  Vue Land ",
        "description": "Chat for Vue developers",
        "fullDescription": "The official Vue.js Discord",
        "tech_stack": "Vue",
        "platform": "Discord",
        "location_mode": "Global/Online",
        "tags": "Vue, JavaScript, ,Frontend",
        "joining_link": "https://discord.com/invite/vue",
        "member_count": "12000",
    }
