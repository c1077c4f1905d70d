#!/usr/bin/env python3
"""Monitoring / healthcheck script for the Art Market API.

Checks the availability of:
    - FastAPI application (/health)
    - PostgreSQL
    - Redis
    - Public object storage

Outputs a JSON array of ``{service, status, latency_ms}`` objects.

Exit codes:
    0 -- all services healthy
    1 -- one or more services unhealthy
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
import time
from typing import Any, Awaitable, Callable

import asyncpg  # type: ignore[import-untyped]
import httpx
from redis.asyncio import Redis

APP_URL = os.environ.get("APP_URL", "http://localhost:8000")
DATABASE_URL = os.environ.get(
    "DATABASE_URL", "postgresql://app:devpassword@db:5432/artmarket"
)
REDIS_URL = os.environ.get("REDIS_URL", "redis://redis:6379/0")
STORAGE_PUBLIC_URL = os.environ.get("STORAGE_PUBLIC_URL", "http://localhost:54321")

CHECK_TIMEOUT = float(os.environ.get("HEALTHCHECK_TIMEOUT", "5"))


def _pg_dsn(url: str) -> str:
    """Normalise a SQLAlchemy-style URL to a plain ``postgresql://`` DSN."""
    for prefix in ("postgresql+asyncpg://", "postgresql+psycopg2://"):
        if url.startswith(prefix):
            url = "postgresql://" + url[len(prefix):]
    return url


async def _timed(service: str, probe: Callable[[], Awaitable[bool]]) -> dict[str, Any]:
    """Run *probe* and report its outcome and latency."""
    start = time.monotonic()
    entry: dict[str, Any] = {"service": service}
    try:
        healthy = await asyncio.wait_for(probe(), timeout=CHECK_TIMEOUT)
        entry["status"] = "healthy" if healthy else "unhealthy"
    except Exception as exc:
        entry["status"] = "unhealthy"
        entry["error"] = str(exc)
    entry["latency_ms"] = round((time.monotonic() - start) * 1000, 2)
    return entry


async def _probe_postgres() -> bool:
    conn = await asyncpg.connect(_pg_dsn(DATABASE_URL))
    try:
        return await conn.fetchval("SELECT 1") == 1
    finally:
        await conn.close()


async def _probe_redis() -> bool:
    redis = Redis.from_url(REDIS_URL, decode_responses=True)
    try:
        return bool(await redis.ping())
    finally:
        await redis.close()


async def run_checks() -> list[dict[str, Any]]:
    """Run all health checks concurrently and return results."""
    async with httpx.AsyncClient() as client:

        async def probe_app() -> bool:
            resp = await client.get(f"{APP_URL}/health")
            return resp.status_code == 200

        async def probe_storage() -> bool:
            # Any HTTP answer means the storage gateway is up.
            resp = await client.get(f"{STORAGE_PUBLIC_URL}/storage/v1/version")
            return resp.status_code < 500

        results = await asyncio.gather(
            _timed("app", probe_app),
            _timed("postgres", _probe_postgres),
            _timed("redis", _probe_redis),
            _timed("storage", probe_storage),
        )
    return list(results)


async def main() -> int:
    results = await run_checks()

    json.dump(results, sys.stdout, indent=2)
    sys.stdout.write("\n")

    return 0 if all(r["status"] == "healthy" for r in results) else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
