"""
Tests for the in-memory rate limiter.
"""
import pytest

import core.rate_limiting as rate_limiting
from conftest import generate_test_user
from core.config import settings
from core.rate_limiting import RateLimiter


def test_rate_limiter_blocks_after_policy_count():
    limiter = RateLimiter({"default": {"requests": 3, "window": 60}})

    results = [limiter.is_allowed("ip_1.2.3.4")[0] for _ in range(4)]
    assert results == [True, True, True, False]

    allowed, info = limiter.is_allowed("ip_1.2.3.4")
    assert not allowed
    assert info["retry_after"] >= 1

    # Other clients are counted separately
    assert limiter.is_allowed("ip_5.6.7.8")[0]


def test_rate_limiter_cleanup():
    limiter = RateLimiter({"default": {"requests": 1, "window": 60}})
    limiter.is_allowed("ip_old")
    limiter.storage["default_ip_old"]["window_start"] -= 7200

    assert limiter.cleanup_expired(max_age_seconds=3600) == 1
    assert limiter.storage == {}


def test_rate_limiter_drops_stale_entries_periodically():
    limiter = RateLimiter({"default": {"requests": 5, "window": 60}})
    limiter.is_allowed("ip_stale")
    limiter.storage["default_ip_stale"]["window_start"] -= 120

    limiter.is_allowed("ip_fresh")
    assert "default_ip_stale" in limiter.storage

    limiter._last_cleanup -= limiter.cleanup_interval
    limiter.is_allowed("ip_fresh")
    assert "default_ip_stale" not in limiter.storage
    assert limiter.storage["default_ip_fresh"]["count"] == 2


@pytest.fixture
def strict_auth_limit(monkeypatch):
    monkeypatch.setattr(settings, "enable_rate_limiting", True)
    monkeypatch.setattr(
        rate_limiting,
        "rate_limiter",
        RateLimiter({"default": {"requests": 100, "window": 60}, "auth": {"requests": 2, "window": 60}}),
    )


def test_auth_routes_are_rate_limited(client, strict_auth_limit):
    credentials = {"email": "nobody@example.com", "password": "whatever1"}

    assert client.post("/api/auth/login", json=credentials).status_code == 401
    assert client.post("/api/auth/login", json=credentials).status_code == 401

    response = client.post("/api/auth/login", json=credentials)
    assert response.status_code == 429
    assert response.json()["error"]["type"] == "RateLimitException"
    assert "Retry-After" in response.headers

    response = client.post("/api/auth/register", json=generate_test_user("limited"))
    assert response.status_code == 429
