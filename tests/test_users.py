"""
Tests for profile editing, the dashboard and the user directory.
"""
import uuid

from conftest import course_payload, circle_payload


def test_update_profile_replaces_fields(client, make_user):
    user = make_user("editor", skills=["go"], interests=["chess"])

    response = client.put(
        "/api/users/profile",
        json={"name": "  New Name ", "bio": "Learning every day", "skills": ["python", "python", "sql"]},
        headers=user["headers"],
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["name"] == "New Name"
    assert body["bio"] == "Learning every day"
    assert body["skills"] == ["python", "sql"]
    # Omitted tag lists are reset
    assert body["interests"] == []
    assert "password_hash" not in body

    profile = client.get("/api/users/profile", headers=user["headers"]).json()
    assert profile["name"] == "New Name"


def test_update_profile_requires_auth(client):
    response = client.put("/api/users/profile", json={"name": "Anon"})
    assert response.status_code == 401


def test_update_profile_rejects_malformed_tags(client, make_user):
    user = make_user("badtags", skills=["go"])

    for tags in ([1, 2], "python", ["ok", {"name": "x"}]):
        response = client.put(
            "/api/users/profile", json={"name": "Tagger", "skills": tags}, headers=user["headers"]
        )
        assert response.status_code == 422, tags
        assert response.json()["error"]["type"] == "ValidationError"

    # Nothing was written
    profile = client.get("/api/users/profile", headers=user["headers"]).json()
    assert profile["skills"] == ["go"]


def test_dashboard_counts_activity(client, make_user):
    owner = make_user("dashowner", role="sharer")
    learner = make_user("dashlearner")

    course = client.post("/api/courses", json=course_payload(title="Dashboard course"), headers=owner["headers"]).json()
    client.post("/api/circles", json=circle_payload(), headers=owner["headers"])
    response = client.post(
        f"/api/courses/{course['id']}/request",
        json={"reason": "curious", "time_window": "2 weeks"},
        headers=learner["headers"],
    )
    assert response.status_code == 201
    client.post("/api/chatbot/ask", json={"question": "What is a loop?"}, headers=learner["headers"])

    owner_dash = client.get("/api/users/dashboard", headers=owner["headers"]).json()
    assert owner_dash["user"]["id"] == owner["id"]
    assert owner_dash["stats"] == {
        "total_courses": 1,
        "total_circles": 1,
        "total_chats": 0,
        "sent_requests": 0,
        "received_requests": 1,
        "pending_requests": 1,
    }
    assert [c["title"] for c in owner_dash["recent_courses"]] == ["Dashboard course"]
    assert owner_dash["recent_courses"][0]["owner"]["id"] == owner["id"]
    assert owner_dash["recent_circles"][0]["creator"]["id"] == owner["id"]

    learner_dash = client.get("/api/users/dashboard", headers=learner["headers"]).json()
    assert learner_dash["stats"]["sent_requests"] == 1
    assert learner_dash["stats"]["total_chats"] == 1
    assert learner_dash["stats"]["total_circles"] == 0
    assert len(learner_dash["recent_chats"]) == 1


def test_dashboard_recent_lists_are_capped(client, make_user):
    owner = make_user("busy", role="sharer")
    for i in range(7):
        client.post("/api/courses", json=course_payload(title=f"Course {i}"), headers=owner["headers"])

    dashboard = client.get("/api/users/dashboard", headers=owner["headers"]).json()
    assert dashboard["stats"]["total_courses"] == 7
    assert [c["title"] for c in dashboard["recent_courses"]] == [f"Course {i}" for i in range(6, 1, -1)]


def test_list_users_excludes_caller_and_filters(client, make_user):
    marker = uuid.uuid4().hex[:6]
    caller = make_user(f"dir{marker}")
    sharer = make_user(f"dir{marker}", role="sharer")
    learner = make_user(f"dir{marker}")

    response = client.get("/api/users", params={"search": marker}, headers=caller["headers"])
    assert response.status_code == 200
    ids = {u["id"] for u in response.json()}
    assert ids == {sharer["id"], learner["id"]}

    response = client.get("/api/users", params={"search": marker, "role": "sharer"}, headers=caller["headers"])
    assert [u["id"] for u in response.json()] == [sharer["id"]]

    # Search matches emails case-insensitively too
    response = client.get("/api/users", params={"search": learner["email"].upper()}, headers=caller["headers"])
    assert [u["id"] for u in response.json()] == [learner["id"]]


def test_list_users_returns_at_most_twenty(client, make_user):
    marker = uuid.uuid4().hex[:6]
    caller = make_user(f"many{marker}")
    for _ in range(22):
        make_user(f"many{marker}")

    response = client.get("/api/users", params={"search": marker}, headers=caller["headers"])
    assert len(response.json()) == 20
    assert caller["id"] not in {u["id"] for u in response.json()}


def test_public_profile(client, make_user):
    owner = make_user("public", role="sharer")
    course = client.post("/api/courses", json=course_payload(), headers=owner["headers"]).json()
    circle = client.post("/api/circles", json=circle_payload(), headers=owner["headers"]).json()

    response = client.get(f"/api/users/{owner['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["courses_shared"] == [
        {"id": course["id"], "title": course["title"], "platform": course["platform"], "category": course["category"]}
    ]
    assert body["joined_circles"] == [
        {"id": circle["id"], "name": circle["name"], "topic": circle["topic"], "skill_level": circle["skill_level"]}
    ]
    assert "password_hash" not in body

    assert client.get("/api/users/999999").status_code == 404
