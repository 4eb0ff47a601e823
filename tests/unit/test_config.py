"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    DatabaseSettings,
    JWTSettings,
    OtpSettings,
    RedisSettings,
    SessionSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "eventhub"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# RedisSettings
# ---------------------------------------------------------------------------


class TestRedisSettings:
    def test_redis_uri_optional(self, monkeypatch):
        monkeypatch.delenv("REDIS_URI", raising=False)
        assert RedisSettings().redis_uri is None

    def test_redis_uri_loaded(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379")
        assert RedisSettings().redis_uri == "redis://localhost:6379"


# ---------------------------------------------------------------------------
# JWTSettings / SessionSettings / OtpSettings
# ---------------------------------------------------------------------------


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "JWT_ISSUER",
            "ACCESS_TOKEN_TTL_DAYS",
            "REFRESH_TOKEN_TTL_DAYS",
            "ACCESS_TOKEN_SECRET",
            "REFRESH_TOKEN_SECRET",
        ):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.jwt_issuer == "eventhub"
        assert s.jwt_algorithm == "HS256"
        assert s.access_token_ttl_days == 15
        assert s.refresh_token_ttl_days == 30
        assert s.access_token_secret == ""

    def test_secrets_from_env(self, monkeypatch):
        monkeypatch.setenv("ACCESS_TOKEN_SECRET", "a" * 32)
        monkeypatch.setenv("REFRESH_TOKEN_SECRET", "r" * 32)
        s = JWTSettings()
        assert s.access_token_secret == "a" * 32
        assert s.refresh_token_secret == "r" * 32


class TestSessionSettings:
    def test_cookie_defaults(self, monkeypatch):
        for var in ("SESSION_TRANSPORT", "COOKIE_SECURE", "COOKIE_SAMESITE"):
            monkeypatch.delenv(var, raising=False)
        s = SessionSettings()
        assert s.session_transport == "cookie"
        assert s.cookie_secure is True
        assert s.cookie_samesite == "none"
        assert (s.access_cookie_name, s.refresh_cookie_name) == ("access", "refresh")

    def test_rejects_unknown_transport(self, monkeypatch):
        monkeypatch.setenv("SESSION_TRANSPORT", "query-string")
        with pytest.raises(PydanticValidationError):
            SessionSettings()


def test_otp_max_ages_default_to_15_minutes(monkeypatch):
    monkeypatch.delenv("EMAIL_OTP_MAX_AGE_MINUTES", raising=False)
    monkeypatch.delenv("PASSWORD_RESET_OTP_MAX_AGE_MINUTES", raising=False)
    s = OtpSettings()
    assert s.email_otp_max_age_minutes == 15
    assert s.password_reset_otp_max_age_minutes == 15


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


@pytest.mark.parametrize(
    "cookie_secret, access_secret, expected",
    [
        (None, "access-secret", "access-secret"),  # falls back to ACCESS_TOKEN_SECRET
        ("cookie-secret", "access-secret", "cookie-secret"),  # COOKIE_SECRET wins
    ],
    ids=["access_fallback", "cookie_secret_wins"],
)
def test_cookie_secret_resolution(with_mongo, cookie_secret, access_secret, expected):
    if cookie_secret:
        with_mongo.setenv("COOKIE_SECRET", cookie_secret)
    else:
        with_mongo.delenv("COOKIE_SECRET", raising=False)
    with_mongo.setenv("ACCESS_TOKEN_SECRET", access_secret)
    assert AppSettings().session.cookie_secret == expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in (
            "db",
            "redis",
            "jwt",
            "session",
            "otp",
            "password_hash",
            "email",
            "rate_limit",
            "logging",
            "sentry",
        ):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        with_mongo.delenv("CORS_ORIGINS", raising=False)
        assert AppSettings().cors_origins == ["*"]

    def test_explicit_sub_config_is_kept(self, with_mongo):
        jwt_settings = JWTSettings(access_token_secret="x" * 32, refresh_token_secret="y" * 32)
        assert AppSettings(jwt=jwt_settings).jwt is jwt_settings
