"""All repositories bound to one database, built once in the app lifespan."""

from __future__ import annotations

from dataclasses import dataclass

from pymongo.asynchronous.database import AsyncDatabase

from repositories.event_repository import EventRepository, RegistrationRepository
from repositories.otp_repository import EmailOtpRepository, PasswordResetOtpRepository
from repositories.refresh_token_repository import RefreshTokenRepository
from repositories.user_repository import UserRepository


@dataclass
class Repositories:
    users: UserRepository
    email_otps: EmailOtpRepository
    reset_otps: PasswordResetOtpRepository
    refresh_tokens: RefreshTokenRepository
    events: EventRepository
    registrations: RegistrationRepository


def build_repositories(db: AsyncDatabase) -> Repositories:
    return Repositories(
        users=UserRepository(db),
        email_otps=EmailOtpRepository(db),
        reset_otps=PasswordResetOtpRepository(db),
        refresh_tokens=RefreshTokenRepository(db),
        events=EventRepository(db),
        registrations=RegistrationRepository(db),
    )
