"""Versioned API router: every /api/v1 route behind the global request limit."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import enforce_rate_limit
from routes.auth_routes import router as auth_router
from routes.organizer_routes import router as organizer_router
from routes.user_routes import router as user_router


def build_api_router(prefix: str = "/api/v1") -> APIRouter:
    router = APIRouter(prefix=prefix, dependencies=[Depends(enforce_rate_limit)])
    router.include_router(auth_router)
    router.include_router(user_router)
    router.include_router(organizer_router)
    return router
