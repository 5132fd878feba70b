"""Tests for middleware — security headers, request ids, rate limiting, errors."""

import pytest
from httpx import ASGITransport, AsyncClient

from greenlands.config import settings
from greenlands.main import create_app
from greenlands.realtime import pubsub


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    # Plain http: no HSTS
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/health")
    r2 = await client.get("/api/health")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/api/health", headers={"X-Request-ID": "trace-12345"})
    assert r.headers["X-Request-ID"] == "trace-12345"


@pytest.mark.asyncio
async def test_unknown_route_message(client):
    r = await client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"message": "Route not found"}


@pytest.mark.asyncio
async def test_validation_errors_are_400_with_errors_list(client):
    r = await client.post("/api/auth/login", json={"email": "a@b.co"})
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert errors[0]["param"] == "password"
    assert errors[0]["location"] == "body"
    assert "msg" in errors[0]


class _CountingRedis:
    """Just enough of redis.asyncio.Redis for the rate limiter."""

    def __init__(self):
        self.counts = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        return True

    async def ping(self):
        return True


@pytest.mark.asyncio
async def test_rate_limit_rejects_after_ceiling(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_requests", 2)
    monkeypatch.setattr(pubsub, "_redis", _CountingRedis())
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        first = await ac.get("/api/health")
        second = await ac.get("/api/health")
        third = await ac.get("/api/health")

    assert first.status_code == 200
    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert second.status_code == 200
    assert third.status_code == 429
    assert third.json()["code"] == "RATE_LIMITED"
    assert int(third.headers["Retry-After"]) > 0


@pytest.mark.asyncio
async def test_rate_limit_ignores_non_api_paths(monkeypatch):
    redis = _CountingRedis()
    monkeypatch.setattr(settings, "rate_limit_requests", 1)
    monkeypatch.setattr(pubsub, "_redis", redis)
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        for _ in range(3):
            await ac.get("/docs")

    assert redis.counts == {}
