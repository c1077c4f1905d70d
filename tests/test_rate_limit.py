"""Tests for rate limiting and security headers middleware."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.requests import Request

from artmarket.main import app
from artmarket.middleware.rate_limit import _find_matching_rule, _resolve_identifier


def _set_mock_redis(mock_redis):
    """Assign a mock Redis instance to app.state and return the previous value."""
    previous = getattr(app.state, "redis", None)
    app.state.redis = mock_redis
    return previous


def _restore_redis(previous):
    """Restore app.state.redis to its previous value."""
    if previous is None:
        try:
            del app.state.redis
        except AttributeError:
            pass
    else:
        app.state.redis = previous


def _mock_redis(count: int):
    """A Redis double whose sliding-window pipeline reports *count* hits."""
    mock_pipe = MagicMock()
    mock_pipe.zremrangebyscore = MagicMock(return_value=mock_pipe)
    mock_pipe.zadd = MagicMock(return_value=mock_pipe)
    mock_pipe.zcard = MagicMock(return_value=mock_pipe)
    mock_pipe.expire = MagicMock(return_value=mock_pipe)
    # Pipeline results: [zremrangebyscore, zadd, zcard, expire]
    mock_pipe.execute = AsyncMock(return_value=[0, True, count, True])

    mock_redis = AsyncMock()
    mock_redis.pipeline = MagicMock(return_value=mock_pipe)
    return mock_redis


def _request(headers: dict | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": raw,
        "client": ("203.0.113.7", 1234),
    })


# ---------------------------------------------------------------------------
# Security headers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_security_headers(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "camera=()" in response.headers["Permissions-Policy"]
    assert "default-src 'none'" in response.headers["Content-Security-Policy"]
    assert "Strict-Transport-Security" not in response.headers


@pytest.mark.asyncio
async def test_health_not_rate_limited(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert "X-RateLimit-Limit" not in response.headers


# ---------------------------------------------------------------------------
# Rule matching
# ---------------------------------------------------------------------------

def test_offer_rule_matches_before_submission_rule():
    rule = _find_matching_rule("/api/v1/artworks/abc/offers", "POST")
    assert rule["limit"] == 20
    assert rule["suffix"] == "/offers"


def test_submission_rule():
    rule = _find_matching_rule("/api/v1/artworks", "POST")
    assert rule["limit"] == 10
    assert "suffix" not in rule


def test_reads_are_not_limited():
    assert _find_matching_rule("/api/v1/artworks", "GET") is None


def test_checkout_limited_per_ip():
    rule = _find_matching_rule("/api/v1/checkout", "POST")
    assert rule["key"] == "ip"


def test_client_identifier_hashes_bearer_token():
    rule = {"key": "client"}
    identifier = _resolve_identifier(_request({"Authorization": "Bearer secret-token"}), rule)

    assert identifier.startswith("tok:")
    assert "secret-token" not in identifier


def test_client_identifier_falls_back_to_ip():
    identifier = _resolve_identifier(_request(), {"key": "client"})
    assert identifier == "203.0.113.7"


def test_forwarded_for_first_hop_used():
    identifier = _resolve_identifier(
        _request({"X-Forwarded-For": "198.51.100.1, 10.0.0.1"}), {"key": "ip"},
    )
    assert identifier == "198.51.100.1"


# ---------------------------------------------------------------------------
# Middleware behaviour
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_rate_limit_headers_on_limited_endpoint(client, mock_db):
    previous = _set_mock_redis(_mock_redis(count=1))
    try:
        response = await client.post("/api/v1/checkout", json={})
    finally:
        _restore_redis(previous)

    # Validation fails, but the limiter still ran first.
    assert response.status_code == 400
    assert response.headers["X-RateLimit-Limit"] == "10"
    assert response.headers["X-RateLimit-Remaining"] == "9"


@pytest.mark.asyncio
async def test_rate_limit_exceeded_returns_429(client, mock_db):
    previous = _set_mock_redis(_mock_redis(count=11))
    try:
        response = await client.post("/api/v1/checkout", json={})
    finally:
        _restore_redis(previous)

    assert response.status_code == 429
    assert "error" in response.json()
    assert response.headers["Retry-After"] == "3600"
    mock_db.execute.assert_not_called()


@pytest.mark.asyncio
async def test_webhook_never_rate_limited(client, mock_db):
    mock_redis = _mock_redis(count=10_000)
    previous = _set_mock_redis(mock_redis)
    try:
        response = await client.post("/api/v1/webhooks/stripe", content=b"{}")
    finally:
        _restore_redis(previous)

    assert response.status_code == 400
    mock_redis.pipeline.assert_not_called()


@pytest.mark.asyncio
async def test_rate_limit_skipped_on_redis_error(client, mock_db):
    """When Redis is unavailable the request should still succeed (fail-open)."""
    mock_redis = AsyncMock()
    mock_redis.pipeline = MagicMock(side_effect=ConnectionError("Redis down"))

    previous = _set_mock_redis(mock_redis)
    try:
        response = await client.post("/api/v1/checkout", json={})
    finally:
        _restore_redis(previous)

    assert response.status_code == 400
    assert "X-RateLimit-Limit" not in response.headers
