"""
Tests for health endpoints, middleware headers and the error envelope.
"""


def test_health_liveness(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_database(client):
    response = client.get("/api/health/database")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_detailed_reports_unconfigured_ai(client):
    response = client.get("/api/health/detailed")
    assert response.status_code == 200
    body = response.json()
    assert body["database"]["status"] == "healthy"
    assert body["ai_service"]["status"] == "not_configured"
    assert body["overall_status"] == "degraded"


def test_security_and_request_id_headers(client):
    response = client.get("/api/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"]["status_code"] == 404
