"""
Tests for course listings, ownership rules and the access request workflow.
"""
import pytest

from conftest import course_payload
from core.config import settings
from services.course_service import CourseService


def test_create_then_get_returns_submitted_fields(client, make_user):
    owner = make_user("roundtrip", role="sharer")
    payload = course_payload(title="Data Structures", type="exchange", difficulty="advanced")

    response = client.post("/api/courses", json=payload, headers=owner["headers"])
    assert response.status_code == 201, response.text
    created = response.json()

    fetched = client.get(f"/api/courses/{created['id']}").json()
    for field, value in payload.items():
        assert fetched[field] == value, field
    assert fetched["availability"] == "available"
    assert fetched["image_url"].startswith("https://")
    assert fetched["owner"]["id"] == owner["id"]
    assert "bio" in fetched["owner"]


def test_list_courses_filters_and_hides_unavailable(client, make_user):
    owner = make_user("lister", role="sharer")
    title = f"Rare Topic {owner['id']}"
    visible = client.post("/api/courses", json=course_payload(title=title, category="rare"), headers=owner["headers"]).json()
    hidden = client.post(
        "/api/courses",
        json=course_payload(title=title, category="rare", availability="busy"),
        headers=owner["headers"],
    ).json()

    ids = [c["id"] for c in client.get("/api/courses", params={"search": title.lower()}).json()]
    assert visible["id"] in ids
    assert hidden["id"] not in ids

    assert client.get("/api/courses", params={"search": title, "type": "exchange"}).json() == []
    assert len(client.get("/api/courses", params={"search": title, "difficulty": "beginner"}).json()) == 1


def test_list_courses_newest_first(client, make_user):
    owner = make_user("order", role="sharer")
    tag = f"ordering-{owner['id']}"
    first = client.post("/api/courses", json=course_payload(category=tag), headers=owner["headers"]).json()
    second = client.post("/api/courses", json=course_payload(category=tag), headers=owner["headers"]).json()

    ids = [c["id"] for c in client.get("/api/courses", params={"category": tag}).json()]
    assert ids == [second["id"], first["id"]]


def test_only_owner_can_update_or_delete(client, make_user):
    owner = make_user("owner", role="sharer")
    other = make_user("other")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    url = f"/api/courses/{course['id']}"

    assert client.put(url, json={"title": "Hijacked"}).status_code == 401
    assert client.put(url, json={"title": "Hijacked"}, headers=other["headers"]).status_code == 403
    assert client.delete(url, headers=other["headers"]).status_code == 403
    assert client.delete(url).status_code == 401

    response = client.put(url, json={"title": "Renamed", "availability": "completed"}, headers=owner["headers"])
    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"
    assert response.json()["owner_id"] == owner["id"]

    assert client.delete(url, headers=owner["headers"]).status_code == 200
    assert client.get(url).status_code == 404
    assert client.put(url, json={"title": "Ghost"}, headers=owner["headers"]).status_code == 404


def test_request_access_scenario(client, make_user):
    a = make_user("sharerA", role="sharer")
    b = make_user("learnerB")
    course = client.post(
        "/api/courses", json=course_payload(type="lend", category="programming"), headers=a["headers"]
    ).json()
    request_url = f"/api/courses/{course['id']}/request"
    body = {"reason": "need it", "time_window": "1 week"}

    response = client.post(request_url, json=body, headers=b["headers"])
    assert response.status_code == 201, response.text
    request = response.json()
    assert request["status"] == "pending"
    assert request["course"]["id"] == course["id"]
    assert request["requester"]["id"] == b["id"]
    assert request["owner"]["id"] == a["id"]

    response = client.post(request_url, json=body, headers=b["headers"])
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ConflictException"

    response = client.put(f"/api/courses/requests/{request['id']}", json={"status": "approved"}, headers=a["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    response = client.post(request_url, json=body, headers=b["headers"])
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ConflictException"


def test_request_own_course_is_invalid(client, make_user):
    owner = make_user("selfish", role="sharer")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()

    response = client.post(f"/api/courses/{course['id']}/request", json={}, headers=owner["headers"])
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "InvalidOperationException"

    assert client.post("/api/courses/999999/request", json={}, headers=owner["headers"]).status_code == 404


def test_new_request_allowed_after_denial(client, make_user):
    owner = make_user("denier", role="sharer")
    learner = make_user("retry")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    request_url = f"/api/courses/{course['id']}/request"

    first = client.post(request_url, json={"reason": "please"}, headers=learner["headers"]).json()
    response = client.put(
        f"/api/courses/requests/{first['id']}",
        json={"status": "denied", "message": "Not this month"},
        headers=owner["headers"],
    )
    assert response.json()["message"] == "Not this month"

    response = client.post(request_url, json={"reason": "please, again"}, headers=learner["headers"])
    assert response.status_code == 201
    assert response.json()["id"] != first["id"]


def test_duplicate_request_rejected_by_storage(client, make_user, monkeypatch):
    owner = make_user("idxowner", role="sharer")
    learner = make_user("idxlearner")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    request_url = f"/api/courses/{course['id']}/request"
    assert client.post(request_url, json={}, headers=learner["headers"]).status_code == 201

    # Simulate a concurrent request that passed the duplicate check
    monkeypatch.setattr(CourseService, "_has_active_request", lambda self, course_id, requester_id: False)

    response = client.post(request_url, json={}, headers=learner["headers"])
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ConflictException"

    sent = client.get("/api/courses/requests/sent", headers=learner["headers"]).json()
    assert [r["course"]["id"] for r in sent] == [course["id"]]


def test_reactivating_denied_request_conflicts_with_active_one(client, make_user):
    owner = make_user("reactowner", role="sharer")
    learner = make_user("reactlearner")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    request_url = f"/api/courses/{course['id']}/request"

    first = client.post(request_url, json={}, headers=learner["headers"]).json()
    client.put(f"/api/courses/requests/{first['id']}", json={"status": "denied"}, headers=owner["headers"])
    second = client.post(request_url, json={}, headers=learner["headers"]).json()

    response = client.put(f"/api/courses/requests/{first['id']}", json={"status": "approved"}, headers=owner["headers"])
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ConflictException"

    statuses = {r["id"]: r["status"] for r in client.get("/api/courses/requests/received", headers=owner["headers"]).json()}
    assert statuses == {first["id"]: "denied", second["id"]: "pending"}


def test_sent_and_received_requests(client, make_user):
    owner = make_user("receiver", role="sharer")
    learner = make_user("sender")
    course1 = client.post("/api/courses", json=course_payload(title="One"), headers=owner["headers"]).json()
    course2 = client.post("/api/courses", json=course_payload(title="Two"), headers=owner["headers"]).json()
    client.post(f"/api/courses/{course1['id']}/request", json={}, headers=learner["headers"])
    client.post(f"/api/courses/{course2['id']}/request", json={}, headers=learner["headers"])

    sent = client.get("/api/courses/requests/sent", headers=learner["headers"]).json()
    assert [r["course"]["title"] for r in sent] == ["Two", "One"]

    received = client.get("/api/courses/requests/received", headers=owner["headers"]).json()
    assert [r["requester"]["id"] for r in received] == [learner["id"], learner["id"]]

    assert client.get("/api/courses/requests/received", headers=learner["headers"]).json() == []


def test_only_request_owner_can_change_status(client, make_user):
    owner = make_user("reqowner", role="sharer")
    learner = make_user("reqlearner")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    request = client.post(f"/api/courses/{course['id']}/request", json={}, headers=learner["headers"]).json()

    url = f"/api/courses/requests/{request['id']}"
    assert client.put(url, json={"status": "approved"}, headers=learner["headers"]).status_code == 403
    assert client.put("/api/courses/requests/999999", json={"status": "approved"}, headers=owner["headers"]).status_code == 404


def test_any_transition_allowed_by_default(client, make_user):
    owner = make_user("loose", role="sharer")
    learner = make_user("loosel")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    request = client.post(f"/api/courses/{course['id']}/request", json={}, headers=learner["headers"]).json()
    url = f"/api/courses/requests/{request['id']}"

    assert client.put(url, json={"status": "approved"}, headers=owner["headers"]).status_code == 200
    response = client.put(url, json={"status": "pending"}, headers=owner["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "pending"


@pytest.fixture
def enforced_transitions(monkeypatch):
    monkeypatch.setattr(settings, "enforce_request_transitions", True)


def test_enforced_transitions(client, make_user, enforced_transitions):
    owner = make_user("strict", role="sharer")
    learner = make_user("strictl")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    request = client.post(f"/api/courses/{course['id']}/request", json={}, headers=learner["headers"]).json()
    url = f"/api/courses/requests/{request['id']}"

    assert client.put(url, json={"status": "approved"}, headers=owner["headers"]).status_code == 200

    response = client.put(url, json={"status": "pending"}, headers=owner["headers"])
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "InvalidOperationException"
