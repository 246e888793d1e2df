"""
Shared fixtures: a throwaway SQLite database and helpers for test users.

Environment variables are set before the application is imported so the
settings object picks them up.
"""
import os
import sys
import tempfile
import uuid

# Add the parent directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

_TEST_DIR = tempfile.mkdtemp(prefix="skillcircle_tests_")
os.environ.update({
    "DATABASE_URL": f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}",
    "GEMINI_API_KEY": "",
    "ENABLE_RATE_LIMITING": "false",
    "ENABLE_FILE_LOGGING": "false",
    "BCRYPT_ROUNDS": "4",
    "JWT_SECRET_KEY": "test-secret",
    "LOG_LEVEL": "WARNING",
})

import pytest
from fastapi.testclient import TestClient

from app import app
from db_config import init_db

init_db()


def generate_test_user(prefix="user", role="learner"):
    suffix = uuid.uuid4().hex[:8]
    return {
        "name": f"{prefix.title()} {suffix}",
        "email": f"{prefix}_{suffix}@example.com",
        "password": "testpass123",
        "role": role,
    }


def register_user(client, prefix="user", role="learner", **extra):
    data = generate_test_user(prefix, role)
    data.update(extra)
    response = client.post("/api/auth/register", json=data)
    assert response.status_code == 201, f"Registration failed: {response.text}"
    body = response.json()
    return {
        "id": body["user"]["id"],
        "email": body["user"]["email"],
        "name": body["user"]["name"],
        "password": data["password"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


def course_payload(**overrides):
    payload = {
        "title": "Intro to Python",
        "description": "Variables, loops and functions",
        "platform": "Udemy",
        "type": "lend",
        "category": "programming",
        "duration": "6 weeks",
        "difficulty": "beginner",
    }
    payload.update(overrides)
    return payload


def circle_payload(**overrides):
    payload = {
        "name": "Evening Pythonistas",
        "topic": "Python",
        "skill_level": "beginner",
        "availability": "Weekday evenings",
        "goals": "Finish one project each month",
        "resources": ["https://docs.python.org", "Automate the Boring Stuff"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    def _make(prefix="user", role="learner", **extra):
        return register_user(client, prefix, role, **extra)
    return _make
