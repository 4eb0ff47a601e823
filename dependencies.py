"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Everything they hand out was built once in the
app lifespan and lives on ``app.state``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request
from limits.errors import StorageError

from errors import ErrorCode, RateLimitError
from infrastructure.rate_limiter import RequestRateLimiter
from infrastructure.session_transport import TokenTransport
from services.auth_service import AuthService
from services.event_service import EventService
from services.registration_service import RegistrationService
from shared.ip_utils import get_client_ip
from shared.logging import get_logger

log = get_logger(__name__)


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


async def get_redis(request: Request):
    """Return the async Redis client from app.state (may be None if not configured)."""
    return request.app.state.redis


def get_transport(request: Request) -> TokenTransport:
    return request.app.state.transport


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.services.auth


def get_event_service(request: Request) -> EventService:
    return request.app.state.services.events


def get_registration_service(request: Request) -> RegistrationService:
    return request.app.state.services.registrations


async def enforce_rate_limit(request: Request) -> None:
    """Global per-IP request limit. A no-op when Redis is not configured."""
    limiter: Optional[RequestRateLimiter] = request.app.state.rate_limiter
    if limiter is None:
        return

    client_ip = get_client_ip(request)
    try:
        result = await limiter.hit(client_ip or "unknown")
    except StorageError as e:
        # Fail open when the counter backend is unreachable
        log.warning(
            "rate_limit_backend_error",
            error=str(e.storage_error),
            error_type=type(e.storage_error).__name__,
        )
        return

    if not result.allowed:
        log.warning("rate_limit_exceeded", client_ip=client_ip, path=request.url.path)
        raise RateLimitError(
            "too many requests, please try again later",
            error_code=ErrorCode.TOO_MANY_REQUESTS,
            retry_after_seconds=result.retry_after_seconds,
        )
