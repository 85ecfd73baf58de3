"""Tests for the community listing, detail, featured and creation endpoints."""
import time

from bson import ObjectId
from fastapi import status


def test_list_filters_platform_and_activity(client, make_community) -> None:
    make_community(title="Big", platform="Discord", activity_level="High", member_count=500)
    make_community(title="Small", platform="Discord", activity_level="High", member_count=10)
    make_community(title="Mid", platform="Discord", activity_level="High", member_count=200)
    make_community(title="Quiet", platform="Discord", activity_level="Low", member_count=9000)
    make_community(title="Elsewhere", platform="Reddit", activity_level="High", member_count=9000)

    response = client.get("/api/communities", params={"platform": "Discord", "activity_level": "High", "page": 1, "limit": 20})
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert [c["title"] for c in body["data"]] == ["Big", "Mid", "Small"]
    assert all(c["platform"] == "Discord" and c["activity_level"] == "High" for c in body["data"])
    assert body["total"] == 3
    assert body["count"] == 3
    assert body["pages"] == 1
    assert all("id" in c and "_id" not in c for c in body["data"])


def test_list_pagination(client, make_community) -> None:
    for members in (50, 40, 30, 20, 10):
        make_community(member_count=members)

    body = client.get("/api/communities", params={"limit": 2, "page": 3}).json()
    assert body["total"] == 5
    assert body["pages"] == 3
    assert body["page"] == 3
    assert body["count"] == 1
    assert body["data"][0]["member_count"] == 10


def test_list_ties_break_on_newest_first(client, make_community) -> None:
    make_community(title="Older", member_count=100)
    time.sleep(0.01)
    make_community(title="Newer", member_count=100)

    body = client.get("/api/communities").json()
    assert [c["title"] for c in body["data"]] == ["Newer", "Older"]


def test_list_search_is_case_insensitive_across_fields(client, make_community) -> None:
    make_community(title="PySlackers", tags=["Chat"])
    make_community(title="Snakes", description="All things python")
    make_community(title="Gophers", tags=["Go", "Python"])
    make_community(title="Rustaceans", tags=["Rust"])

    body = client.get("/api/communities", params={"search": "PYTHON"}).json()
    assert sorted(c["title"] for c in body["data"]) == ["Gophers", "Snakes"]


def test_list_search_treats_input_literally(client, make_community) -> None:
    make_community(title="C++ Together")
    make_community(title="Cxx Together")

    body = client.get("/api/communities", params={"search": "c++"}).json()
    assert [c["title"] for c in body["data"]] == ["C++ Together"]


def test_list_tech_stack_partial_match(client, make_community) -> None:
    make_community(title="Nodeiflux", tech_stack="Node.js")
    make_community(title="Nodexjs", tech_stack="Nodexjs")
    make_community(title="Reactiflux", tech_stack="React")

    body = client.get("/api/communities", params={"tech_stack": "node.js"}).json()
    assert [c["title"] for c in body["data"]] == ["Nodeiflux"]


def test_list_rejects_bad_page(client) -> None:
    response = client.get("/api/communities", params={"page": 0})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "page"


def test_get_community_with_related(client, make_community) -> None:
    target = make_community(title="Target", tech_stack="Python", tags=["Data"])
    same_stack = make_community(title="Same stack", tech_stack="Python")
    shared_tag = make_community(title="Shared tag", tech_stack="Go", tags=["Data", "Ops"])
    make_community(title="Unrelated", tech_stack="Rust", tags=["Systems"])

    response = client.get(f"/api/communities/{target['_id']}")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["data"]["title"] == "Target"
    assert [c["id"] for c in body["related"]] == [str(same_stack["_id"]), str(shared_tag["_id"])]


def test_related_is_capped_and_ordered_by_id(client, make_community) -> None:
    target = make_community(tech_stack="React")
    others = [make_community(tech_stack="React") for _ in range(5)]

    body = client.get(f"/api/communities/{target['_id']}").json()
    assert [c["id"] for c in body["related"]] == [str(o["_id"]) for o in others[:3]]


def test_get_missing_community_is_404(client) -> None:
    response = client.get(f"/api/communities/{ObjectId()}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "message": "Community not found"}


def test_get_malformed_id_is_server_error(raw_client) -> None:
    response = raw_client.get("/api/communities/not-an-id")
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Server error"


def test_featured_top_six(client, make_community) -> None:
    for members in (1, 2, 3, 4, 5, 6, 7):
        make_community(title=f"M{members}", member_count=members)

    body = client.get("/api/communities/featured/list").json()
    assert body["success"] is True
    assert [c["title"] for c in body["data"]] == ["M7", "M6", "M5", "M4", "M3", "M2"]


def test_create_community(client, auth_headers, submission, mongo) -> None:
    response = client.post("/api/communities", json=submission, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["title"] == "Vue Land"
    assert data["full_description"] == "The official Vue.js Discord"
    assert data["tags"] == ["Vue", "JavaScript", "Frontend"]
    assert data["member_count"] == 12000
    assert data["activity_level"] == "Medium"
    assert data["id"]
    assert data["created_at"]
    assert mongo["community"].count_documents({}) == 1


def test_create_allows_duplicate_titles(client, auth_headers, submission, mongo) -> None:
    client.post("/api/communities", json=submission, headers=auth_headers)
    response = client.post("/api/communities", json=submission, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert mongo["community"].count_documents({"title": "Vue Land"}) == 2


def test_create_tags_list_and_string_agree(client, auth_headers, submission) -> None:
    from_string = client.post("/api/communities", json=submission, headers=auth_headers).json()["data"]
    submission["tags"] = ["Vue", " JavaScript", "", "Frontend"]
    from_list = client.post("/api/communities", json=submission, headers=auth_headers).json()["data"]
    assert from_string["tags"] == from_list["tags"]


def test_create_missing_joining_link_writes_nothing(client, auth_headers, submission, mongo) -> None:
    submission.pop("joining_link")
    response = client.post("/api/communities", json=submission, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"] == [{"field": "joining_link", "message": "Joining link is required"}]
    assert mongo["community"].count_documents({}) == 0


def test_create_invalid_url_has_distinct_message(client, auth_headers, submission, mongo) -> None:
    submission["joining_link"] = "not a url"
    response = client.post("/api/communities", json=submission, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Invalid joining link URL format"
    assert mongo["community"].count_documents({}) == 0


def test_create_requires_auth(client, submission, mongo) -> None:
    response = client.post("/api/communities", json=submission)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["success"] is False
    assert mongo["community"].count_documents({}) == 0
