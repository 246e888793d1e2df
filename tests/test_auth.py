"""
Tests for registration, login, the bearer guard and token helpers.
"""
from datetime import timedelta

from conftest import generate_test_user
from core.security import create_access_token, get_password_hash, verify_password, verify_token


def test_register_returns_token_and_user(client):
    data = generate_test_user("reg", role="sharer")
    data["email"] = "  " + data["email"].upper() + " "
    data["skills"] = ["python", "python", " sql "]

    response = client.post("/api/auth/register", json=data)
    assert response.status_code == 201, f"Registration failed: {response.text}"

    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["expires_in"] > 0
    assert body["user"]["email"] == data["email"].strip().lower()
    assert body["user"]["role"] == "sharer"
    assert body["user"]["skills"] == ["python", "sql"]
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]


def test_register_rejects_duplicate_email_case_insensitively(client):
    data = generate_test_user("dup")
    assert client.post("/api/auth/register", json=data).status_code == 201

    again = dict(data, email=data["email"].upper())
    response = client.post("/api/auth/register", json=again)
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ConflictException"


def test_register_validates_payload(client):
    data = generate_test_user("short")
    data["password"] = "12345"
    response = client.post("/api/auth/register", json=data)
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "ValidationError"

    data = generate_test_user("badrole")
    data["role"] = "admin"
    assert client.post("/api/auth/register", json=data).status_code == 422

    data = generate_test_user("badtags")
    data["interests"] = [7]
    assert client.post("/api/auth/register", json=data).status_code == 422

    data = generate_test_user("strtags")
    data["skills"] = "python"
    assert client.post("/api/auth/register", json=data).status_code == 422


def test_login(client, make_user):
    user = make_user("login")

    response = client.post("/api/auth/login", json={"email": user["email"].upper(), "password": user["password"]})
    assert response.status_code == 200, response.text
    assert response.json()["user"]["id"] == user["id"]

    response = client.post("/api/auth/login", json={"email": user["email"], "password": "wrong-password"})
    assert response.status_code == 401

    response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})
    assert response.status_code == 401


def test_profile_requires_valid_token(client, make_user):
    response = client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.headers.get("WWW-Authenticate") == "Bearer"

    response = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401

    user = make_user("profile")
    response = client.get("/api/auth/profile", headers=user["headers"])
    assert response.status_code == 200
    assert response.json()["id"] == user["id"]


def test_token_for_missing_user_is_rejected(client):
    token = create_access_token({"sub": "999999"})
    response = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert "user not found" in response.json()["error"]["message"]


def test_password_hashing():
    hashed = get_password_hash("testpass123")
    assert hashed != "testpass123"
    assert verify_password("testpass123", hashed)
    assert not verify_password("wrongpassword", hashed)
    assert not verify_password("testpass123", "not-a-bcrypt-hash")


def test_token_round_trip_and_expiry():
    token = create_access_token({"sub": "42"})
    payload = verify_token(token)
    assert payload["sub"] == "42"
    assert "exp" in payload

    expired = create_access_token({"sub": "42"}, expires_delta=timedelta(seconds=-5))
    assert verify_token(expired) is None
