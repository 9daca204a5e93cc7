"""Health endpoint and cross-cutting response behaviour."""

from __future__ import annotations

from tests.helpers.assertions import assert_problem


def test_health_reports_database_and_ledger(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["db"] == "ok"
    assert body["ledger"] == "sql"


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_unknown_route_is_problem_json(client):
    body = assert_problem(client.get("/api/v1/nowhere"), 404)
    assert body["code"] == "not_found"
    assert body["request_id"]


def test_cors_preflight_allows_configured_origin(client):
    resp = client.options(
        "/api/v1/markers",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
