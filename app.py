"""
FastAPI application factory.
create_app() is the single entry point for building the app.

Process-wide collaborators (Mongo client, optional Redis, outbound HTTP
client, mail provider, repositories, services, session transport) are built
once in the lifespan, stored on ``app.state`` and closed on shutdown.
Tests pass prebuilt repositories and a mail provider to skip the network.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.rate_limiter import RequestRateLimiter, create_rate_limit_storage
from infrastructure.redis_client import create_redis_client
from infrastructure.session_transport import build_transport
from middleware.session import SessionGate
from repositories.indexes import ensure_indexes
from repositories.registry import Repositories, build_repositories
from routes.api_v1 import build_api_router
from routes.health_routes import router as health_router
from services.registry import build_services
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    repositories: Optional[Repositories] = None,
    email_provider: Optional[EmailProvider] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging.log_level, settings.logging.log_format)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        app.state.settings = settings

        mongo_client: Optional[AsyncMongoClient] = None
        repos = repositories
        if repos is None:
            mongo_client = AsyncMongoClient(settings.db.mongodb_uri, tz_aware=True)
            app.state.db = mongo_client[settings.db.db_name]
            await ensure_indexes(app.state.db)
            repos = build_repositories(app.state.db)
        else:
            app.state.db = None
        app.state.mongo_client = mongo_client
        app.state.repositories = repos

        # Redis is optional; without it the request rate limit is off
        redis_client = await create_redis_client(settings.redis.redis_uri)
        app.state.redis = redis_client
        app.state.rate_limiter = (
            RequestRateLimiter(
                create_rate_limit_storage(settings.redis.redis_uri),
                settings.rate_limit.rate_limit,
            )
            if redis_client is not None
            else None
        )

        http_client: Optional[HttpClient] = None
        mailer = email_provider
        if mailer is None:
            http_client = HttpClient(timeout=10.0)
            mailer = ZeptoMailProvider(
                settings.email, http_client, app_name=settings.app_name
            )
        app.state.http_client = http_client

        services = build_services(settings, repos, mailer, clock=clock)
        app.state.services = services
        app.state.transport = build_transport(
            settings.session,
            services.tokens.access_ttl,
            services.tokens.refresh_ttl,
            clock=clock,
        )
        app.state.session_gate = SessionGate(
            services.tokens, repos.users, app.state.transport
        )

        log.info(
            "app_started",
            env=settings.env,
            session_transport=settings.session.session_transport,
            rate_limit_enabled=redis_client is not None,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        if http_client is not None:
            await http_client.aclose()
        if redis_client is not None:
            await redis_client.aclose()
        if mongo_client is not None:
            await mongo_client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Cookie sessions need credentials support on cross-origin calls
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Access-Token", "X-Refresh-Token"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(build_api_router(settings.api_prefix))

    return app
