"""Tests for security middleware: headers, request IDs, error shape."""

import uuid

import pytest

from folio.middleware.request_id import resolve_request_id


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "Cache-Control" not in r.headers


@pytest.mark.asyncio
async def test_auth_responses_are_not_cached(client):
    r = await client.get("/api/admin/status")
    assert r.headers["Cache-Control"] == "no-store"
    r = await client.get("/api/auth/me")
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.get("/api/health")
    r2 = await client.get("/api/health")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/api/health", headers={"X-Request-ID": "trace-12345"})
    assert r.headers["X-Request-ID"] == "trace-12345"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "incoming",
    ["bad id admin@example.com", "x" * 129, "<script>", "id;role=admin"],
)
async def test_unsafe_request_id_is_replaced(client, incoming):
    r = await client.get("/api/health", headers={"X-Request-ID": incoming})
    echoed = r.headers["X-Request-ID"]
    assert echoed != incoming
    assert uuid.UUID(echoed)


def test_resolve_request_id():
    assert resolve_request_id("req-1.a_B") == "req-1.a_B"
    assert uuid.UUID(resolve_request_id(None))
    assert uuid.UUID(resolve_request_id(""))


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    r = await client.get("/api/health")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(client):
    r = await client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Route not found"}
