"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from errors import register_error_handlers
from routes.health_routes import router as health_router


def _build_test_app(mongo_ok: bool = True, redis_state: str = "ok") -> FastAPI:
    """
    Build a minimal FastAPI app with mocked DB/Redis injected via lifespan.

    redis_state is one of "ok", "error" or "absent".
    """
    mock_db = MagicMock()
    if mongo_ok:
        mock_db.client.admin.command = AsyncMock(return_value={"ok": 1})
    else:
        mock_db.client.admin.command = AsyncMock(side_effect=Exception("connection refused"))

    mock_redis = None
    if redis_state != "absent":
        mock_redis = AsyncMock()
        if redis_state == "ok":
            mock_redis.ping = AsyncMock(return_value=True)
        else:
            mock_redis.ping = AsyncMock(side_effect=RedisConnectionError("redis down"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = mock_db
        app.state.redis = mock_redis
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


@pytest.mark.parametrize(
    "mongo_ok, redis_state, status_code, status, checks",
    [
        (True, "ok", 200, "healthy", {"mongodb": "ok", "redis": "ok"}),
        (True, "error", 200, "degraded", {"mongodb": "ok", "redis": "error"}),
        (True, "absent", 200, "degraded", {"mongodb": "ok", "redis": "not_configured"}),
        (False, "ok", 503, "unhealthy", {"mongodb": "error", "redis": "ok"}),
        (False, "error", 503, "unhealthy", {"mongodb": "error", "redis": "error"}),
    ],
    ids=["all_ok", "redis_down", "redis_absent", "mongo_down", "both_down"],
)
def test_health_status(mongo_ok, redis_state, status_code, status, checks):
    app = _build_test_app(mongo_ok=mongo_ok, redis_state=redis_state)
    with TestClient(app) as client:
        resp = client.get("/health")
    assert resp.status_code == status_code
    assert resp.json() == {"status": status, "checks": checks}


def test_health_needs_no_session():
    with TestClient(_build_test_app()) as client:
        resp = client.get("/health")
    assert "set-cookie" not in resp.headers
