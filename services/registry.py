"""
Service wiring.

build_services() constructs every service from settings, repositories and
the mail provider. The app lifespan calls it once and stores the result on
``app.state.services``.
"""

from __future__ import annotations

from dataclasses import dataclass

from config import AppSettings
from infrastructure.email.protocol import EmailProvider
from repositories.registry import Repositories
from services.auth_service import AuthService
from services.event_service import EventService
from services.otp_service import OtpService
from services.registration_service import RegistrationService
from services.token_service import TokenService
from shared.crypto import CredentialStore
from shared.datetime_utils import Clock, utcnow


@dataclass
class Services:
    credentials: CredentialStore
    otp: OtpService
    tokens: TokenService
    auth: AuthService
    events: EventService
    registrations: RegistrationService


def build_services(
    settings: AppSettings,
    repos: Repositories,
    email_provider: EmailProvider,
    clock: Clock = utcnow,
) -> Services:
    credentials = CredentialStore(
        time_cost=settings.password_hash.argon2_time_cost,
        memory_cost=settings.password_hash.argon2_memory_cost,
        parallelism=settings.password_hash.argon2_parallelism,
    )
    otp = OtpService(repos.email_otps, repos.reset_otps, credentials, clock=clock)
    tokens = TokenService(settings.jwt, repos.refresh_tokens, credentials, clock=clock)
    auth = AuthService(
        repos.users,
        otp,
        tokens,
        credentials,
        email_provider,
        settings.otp,
        clock=clock,
    )
    return Services(
        credentials=credentials,
        otp=otp,
        tokens=tokens,
        auth=auth,
        events=EventService(repos.events, clock=clock),
        registrations=RegistrationService(
            repos.registrations, repos.events, repos.users, clock=clock
        ),
    )
