"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Access and refresh tokens are signed with separate secrets so a leaked
access secret cannot be used to mint refresh tokens. The cookie secret
signs the transport cookies on top of the JWT signature.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "eventhub"


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional — without Redis the global request rate limit is disabled
    redis_uri: Optional[str] = None


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "eventhub"
    jwt_algorithm: str = "HS256"
    access_token_secret: str = ""
    refresh_token_secret: str = ""
    access_token_ttl_days: int = 15
    refresh_token_ttl_days: int = 30


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    session_transport: Literal["cookie", "header"] = "cookie"
    access_cookie_name: str = "access"
    refresh_cookie_name: str = "refresh"
    cookie_secret: str = ""
    cookie_secure: bool = True
    cookie_samesite: Literal["lax", "strict", "none"] = "none"


class OtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    email_otp_max_age_minutes: int = 15
    password_reset_otp_max_age_minutes: int = 15


class PasswordHashSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # argon2id work factors; defaults match argon2-cffi's RFC 9106 profile
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 4


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@eventhub.app"
    zepto_from_name: str = "EventHub"


class RateLimitSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # limits notation, applied per client IP to every /api/v1 request
    rate_limit: str = "500/15 minutes"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_url: str = "https://eventhub.app"
    app_name: str = "EventHub"
    api_prefix: str = "/api/v1"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    jwt: Optional[JWTSettings] = None
    session: Optional[SessionSettings] = None
    otp: Optional[OtpSettings] = None
    password_hash: Optional[PasswordHashSettings] = None
    email: Optional[EmailSettings] = None
    rate_limit: Optional[RateLimitSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.session is None:
            self.session = SessionSettings()
        if self.otp is None:
            self.otp = OtpSettings()
        if self.password_hash is None:
            self.password_hash = PasswordHashSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.rate_limit is None:
            self.rate_limit = RateLimitSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        # The cookie signature falls back to the access secret, mirroring a
        # single SERVER_SECRET deployment
        if not self.session.cookie_secret:
            self.session.cookie_secret = self.jwt.access_token_secret

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
