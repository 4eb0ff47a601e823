"""
Session token transports.

The session core only deals in ``TokenPair`` objects; a transport decides how
the pair travels between client and server.

CookieTransport — two signed, http-only cookies (``access`` / ``refresh``).
                  Browsers resend them verbatim; the server may replace both
                  on rotation.
HeaderTransport — ``Authorization: Bearer <access>`` + ``X-Refresh-Token``
                  on requests; a rotated pair comes back in the
                  ``X-Access-Token`` / ``X-Refresh-Token`` response headers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from fastapi import Request, Response

from config import SessionSettings
from schemas.models.principal import TokenPair
from shared.crypto import sign_cookie_value, unsign_cookie_value
from shared.datetime_utils import Clock, utcnow

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

ACCESS_TOKEN_HEADER = "X-Access-Token"
REFRESH_TOKEN_HEADER = "X-Refresh-Token"


class TokenTransport(Protocol):
    def read(self, request: Request) -> tuple[Optional[str], Optional[str]]:
        """Return ``(access_token, refresh_token)``; missing parts are None."""
        ...

    def write(self, response: Response, pair: TokenPair) -> None: ...

    def clear(self, response: Response) -> None: ...


class CookieTransport:
    def __init__(
        self,
        settings: SessionSettings,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        clock: Clock = utcnow,
    ) -> None:
        if not settings.cookie_secret:
            raise RuntimeError("COOKIE_SECRET (or ACCESS_TOKEN_SECRET) must be set")
        self._settings = settings
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._clock = clock

    def read(self, request: Request) -> tuple[Optional[str], Optional[str]]:
        secret = self._settings.cookie_secret
        access = unsign_cookie_value(
            request.cookies.get(self._settings.access_cookie_name), secret
        )
        refresh = unsign_cookie_value(
            request.cookies.get(self._settings.refresh_cookie_name), secret
        )
        return access, refresh

    def _set(self, response: Response, name: str, value: str, expires: datetime) -> None:
        response.set_cookie(
            name,
            value=value,
            expires=expires,
            path="/",
            httponly=True,
            secure=self._settings.cookie_secure,
            samesite=self._settings.cookie_samesite,
        )

    def write(self, response: Response, pair: TokenPair) -> None:
        now = self._clock()
        secret = self._settings.cookie_secret
        self._set(
            response,
            self._settings.access_cookie_name,
            sign_cookie_value(pair.access_token, secret),
            now + self._access_ttl,
        )
        self._set(
            response,
            self._settings.refresh_cookie_name,
            sign_cookie_value(pair.refresh_token, secret),
            now + self._refresh_ttl,
        )

    def clear(self, response: Response) -> None:
        self._set(response, self._settings.access_cookie_name, "", _EPOCH)
        self._set(response, self._settings.refresh_cookie_name, "", _EPOCH)


class HeaderTransport:
    def read(self, request: Request) -> tuple[Optional[str], Optional[str]]:
        access = None
        auth_header = request.headers.get("Authorization", "")
        if auth_header.lower().startswith("bearer "):
            access = auth_header.split(" ", 1)[1].strip() or None
        refresh = request.headers.get(REFRESH_TOKEN_HEADER) or None
        return access, refresh

    def write(self, response: Response, pair: TokenPair) -> None:
        response.headers[ACCESS_TOKEN_HEADER] = pair.access_token
        response.headers[REFRESH_TOKEN_HEADER] = pair.refresh_token

    def clear(self, response: Response) -> None:
        # Header clients drop their stored pair when they see empty values
        response.headers[ACCESS_TOKEN_HEADER] = ""
        response.headers[REFRESH_TOKEN_HEADER] = ""


def build_transport(
    settings: SessionSettings,
    access_ttl: timedelta,
    refresh_ttl: timedelta,
    clock: Clock = utcnow,
) -> TokenTransport:
    if settings.session_transport == "header":
        return HeaderTransport()
    return CookieTransport(settings, access_ttl, refresh_ttl, clock=clock)
