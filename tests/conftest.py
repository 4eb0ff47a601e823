"""
Shared test fixtures.

Repositories are replaced by in-memory fakes with the same async surface, so
services, the session gate and the HTTP routes run unmodified without a
MongoDB server. Time is driven by ``FrozenClock``; every service and the
cookie transport read "now" from it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app import create_app
from config import (
    AppSettings,
    DatabaseSettings,
    JWTSettings,
    LoggingSettings,
    OtpSettings,
    PasswordHashSettings,
    RateLimitSettings,
    RedisSettings,
    SessionSettings,
)
from repositories.registry import Repositories
from schemas.models.event import EventDoc
from schemas.models.otp import EmailOtpDoc, PasswordResetOtpDoc
from schemas.models.registration import EventRegistrationDoc
from schemas.models.token import RefreshTokenDoc
from schemas.models.user import UserDoc
from services.registry import build_services
from shared.crypto import CredentialStore

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"
COOKIE_SECRET = "cookie-secret-for-tests-0123456789abcdef"

STRONG_PASSWORD = "Secret123"


# ── Clock ─────────────────────────────────────────────────────────────────────


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        self.now = now or datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# ── In-memory repositories ────────────────────────────────────────────────────


class _FakeRepository:
    def __init__(self) -> None:
        self.docs: dict[ObjectId, Any] = {}

    async def get_by_id(self, doc_id: Any):
        if doc_id is None:
            return None
        return self.docs.get(doc_id)

    async def insert(self, doc):
        stored = doc.model_copy(update={"id": ObjectId()})
        self.docs[stored.id] = stored
        return stored

    def _update(self, doc_id: Any, **fields: Any) -> None:
        self.docs[doc_id] = self.docs[doc_id].model_copy(update=fields)

    async def _set_flag_once(self, doc_id: Any, flag: str, extra: dict) -> bool:
        doc = self.docs.get(doc_id)
        if doc is None or getattr(doc, flag):
            return False
        self._update(doc_id, **{flag: True, **extra})
        return True

    def _newest_first(self, docs: list) -> list:
        return sorted(docs, key=lambda d: (d.created_on, d.id), reverse=True)


class FakeUserRepository(_FakeRepository):
    async def get_by_email(self, email: str) -> Optional[UserDoc]:
        return next((u for u in self.docs.values() if u.email == email), None)

    async def create(self, user: UserDoc) -> Optional[UserDoc]:
        if await self.get_by_email(user.email) is not None:
            return None
        return await self.insert(user)

    async def mark_email_verified(self, user_id: Any) -> bool:
        user = self.docs.get(user_id)
        if user is None or user.is_email_verified:
            return False
        self._update(user_id, is_email_verified=True)
        return True

    async def update_password_hash(self, user_id: Any, password_hash: str) -> bool:
        if user_id not in self.docs:
            return False
        self._update(user_id, password_hash=password_hash)
        return True

    async def add_organizer(self, user_id: Any, organizer_id: Any) -> None:
        user = self.docs[user_id]
        if organizer_id not in user.organizers:
            self._update(user_id, organizers=[*user.organizers, organizer_id])


class FakeEmailOtpRepository(_FakeRepository):
    async def latest_for_email(self, email: str) -> Optional[EmailOtpDoc]:
        found = self._newest_first([d for d in self.docs.values() if d.email == email])
        return found[0] if found else None

    async def recent_for_email(self, email: str, since: datetime, limit: int) -> list:
        found = [
            d for d in self.docs.values() if d.email == email and d.created_on >= since
        ]
        return self._newest_first(found)[:limit]


class FakePasswordResetOtpRepository(_FakeRepository):
    async def latest_for_email(self, email: str) -> Optional[PasswordResetOtpDoc]:
        found = self._newest_first([d for d in self.docs.values() if d.email == email])
        return found[0] if found else None

    async def mark_utilized(self, otp_id: Any, when: datetime) -> bool:
        return await self._set_flag_once(otp_id, "is_utilized", {"utilized_on": when})


class FakeRefreshTokenRepository(_FakeRepository):
    async def latest_active_for_user(self, user_id: Any) -> Optional[RefreshTokenDoc]:
        found = self._newest_first(
            [d for d in self.docs.values() if d.user_id == user_id and not d.is_consumed]
        )
        return found[0] if found else None

    async def mark_consumed(self, token_id: Any, when: datetime) -> bool:
        return await self._set_flag_once(token_id, "is_consumed", {"consumed_on": when})


class FakeEventRepository(_FakeRepository):
    async def list_all(self) -> list[EventDoc]:
        return sorted(self.docs.values(), key=lambda e: e.start_date)

    async def list_by_organizer(self, organizer_id: Any) -> list[EventDoc]:
        return [e for e in self.docs.values() if e.organizer == organizer_id]

    async def update(self, event_id: Any, fields: dict) -> Optional[EventDoc]:
        if event_id in self.docs and fields:
            self._update(event_id, **fields)
        return self.docs.get(event_id)

    async def add_participant(self, event_id: Any, user_id: Any) -> None:
        event = self.docs[event_id]
        if user_id not in event.participants:
            self._update(event_id, participants=[*event.participants, user_id])

    async def remove_participant(self, event_id: Any, user_id: Any) -> None:
        event = self.docs.get(event_id)
        if event is not None:
            self._update(
                event_id, participants=[p for p in event.participants if p != user_id]
            )

    async def delete(self, event_id: Any) -> bool:
        return self.docs.pop(event_id, None) is not None


class FakeRegistrationRepository(_FakeRepository):
    async def mark_participated(self, registration_id: Any, status: str) -> bool:
        if registration_id not in self.docs:
            return False
        self._update(registration_id, is_participated=True, status=status)
        return True

    async def delete(self, registration_id: Any) -> bool:
        return self.docs.pop(registration_id, None) is not None


def make_fake_repositories() -> Repositories:
    return Repositories(
        users=FakeUserRepository(),
        email_otps=FakeEmailOtpRepository(),
        reset_otps=FakePasswordResetOtpRepository(),
        refresh_tokens=FakeRefreshTokenRepository(),
        events=FakeEventRepository(),
        registrations=FakeRegistrationRepository(),
    )


# ── Mail ──────────────────────────────────────────────────────────────────────


class RecordingMailer:
    """EmailProvider that keeps every message instead of sending it."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.fail = False

    async def send(self, to_email: str, subject: str, html_body: str) -> bool:
        self.messages.append({"kind": "raw", "to": to_email, "subject": subject})
        return not self.fail

    async def _record(self, kind: str, email: str, otp_code: str, valid_minutes: int) -> bool:
        self.messages.append(
            {"kind": kind, "to": email, "code": otp_code, "valid_minutes": valid_minutes}
        )
        return not self.fail

    async def send_verification_email(self, email, user_name, otp_code, valid_minutes) -> bool:
        return await self._record("verify", email, otp_code, valid_minutes)

    async def send_password_reset_email(self, email, user_name, otp_code, valid_minutes) -> bool:
        return await self._record("reset", email, otp_code, valid_minutes)

    def last_code(self, email: str, kind: str = "verify") -> str:
        for message in reversed(self.messages):
            if message["kind"] == kind and message["to"] == email:
                return message["code"]
        raise AssertionError(f"no {kind} mail sent to {email}")


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        env="test",
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        redis=RedisSettings(redis_uri=None),
        jwt=JWTSettings(
            access_token_secret=ACCESS_SECRET,
            refresh_token_secret=REFRESH_SECRET,
        ),
        session=SessionSettings(cookie_secret=COOKIE_SECRET, cookie_secure=False),
        otp=OtpSettings(),
        # Cheapest argon2 parameters so the suite stays fast
        password_hash=PasswordHashSettings(
            argon2_time_cost=1, argon2_memory_cost=8, argon2_parallelism=1
        ),
        rate_limit=RateLimitSettings(),
        logging=LoggingSettings(log_level="WARNING"),
    )


@pytest.fixture
def credentials() -> CredentialStore:
    return CredentialStore(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def repos() -> Repositories:
    return make_fake_repositories()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def services(settings, repos, mailer, clock):
    return build_services(settings, repos, mailer, clock=clock)


@pytest.fixture
def app(settings, repos, mailer, clock):
    return create_app(settings, repositories=repos, email_provider=mailer, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(repos, credentials, clock):
    """Insert a user directly, bypassing signup."""

    async def _make_user(
        email: str = "alice@example.com",
        role: str = "user",
        password: str = STRONG_PASSWORD,
        verified: bool = True,
        suspended: bool = False,
        user_name: str = "Alice",
    ) -> UserDoc:
        return await repos.users.insert(
            UserDoc(
                user_name=user_name,
                email=email,
                password_hash=credentials.hash(password),
                role=role,
                is_email_verified=verified,
                is_suspended=suspended,
                created_on=clock(),
            )
        )

    return _make_user


@pytest.fixture
def make_event(repos, clock):
    async def _make_event(organizer_id: ObjectId, title: str = "PyCon Meetup") -> EventDoc:
        start = clock() + timedelta(days=7)
        return await repos.events.insert(
            EventDoc(
                title=title,
                description="Talks and pizza",
                start_date=start,
                end_date=start + timedelta(hours=3),
                event_type="onsite",
                price="10",
                location="Main Hall",
                organizer=organizer_id,
                created_on=clock(),
            )
        )

    return _make_event


@pytest.fixture
def make_registration(repos, clock):
    async def _make_registration(
        event_id: ObjectId, participant_id: ObjectId, is_paid: bool = False
    ) -> EventRegistrationDoc:
        return await repos.registrations.insert(
            EventRegistrationDoc(
                event=event_id,
                participant=participant_id,
                is_paid=is_paid,
                created_on=clock(),
            )
        )

    return _make_registration
