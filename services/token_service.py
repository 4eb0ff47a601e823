"""
Access/refresh token pairs: issue, verify and rotate.

Both tokens are HS256 JWTs signed with separate secrets. The access token
carries the principal's claims; the refresh token only carries the user id
and a unique ``jti``. Every issued refresh token is persisted as an argon2
hash in ``refresh-tokens`` and can be exchanged for a new pair exactly once.

Expiry is checked against the service clock rather than PyJWT's wall clock,
so ``iat``/``exp`` and the check always agree.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

import jwt

from config import JWTSettings
from repositories.refresh_token_repository import RefreshTokenRepository
from schemas.models.base import parse_object_id
from schemas.models.principal import Principal, TokenPair
from schemas.models.token import RefreshTokenDoc
from shared.crypto import CredentialStore, hash_token
from shared.datetime_utils import Clock, utcnow
from shared.generators import generate_token_id
from shared.logging import get_logger

log = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_DECODE_OPTIONS = {
    "verify_exp": False,
    "verify_iat": False,
    "require": ["sub", "type", "iat", "exp"],
}


class TokenService:
    def __init__(
        self,
        settings: JWTSettings,
        refresh_tokens: RefreshTokenRepository,
        credentials: CredentialStore,
        clock: Clock = utcnow,
    ) -> None:
        if not settings.access_token_secret or not settings.refresh_token_secret:
            raise RuntimeError(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must both be set"
            )
        self._settings = settings
        self._refresh_tokens = refresh_tokens
        self._credentials = credentials
        self._clock = clock

    @property
    def access_ttl(self) -> timedelta:
        return timedelta(days=self._settings.access_token_ttl_days)

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(days=self._settings.refresh_token_ttl_days)

    # ── Minting ──────────────────────────────────────────────────────────────

    def _encode(self, claims: dict[str, Any], secret: str, ttl: timedelta) -> str:
        now = self._clock()
        payload = {
            **claims,
            "iss": self._settings.jwt_issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self._settings.jwt_algorithm)

    def _mint(self, principal: Principal) -> TokenPair:
        access = self._encode(
            {
                "sub": principal.user_id,
                "type": ACCESS_TOKEN_TYPE,
                "role": principal.role,
                "is_admin": principal.is_admin,
                "user_name": principal.user_name,
                "email": principal.email,
            },
            self._settings.access_token_secret,
            self.access_ttl,
        )
        refresh = self._encode(
            {
                "sub": principal.user_id,
                "type": REFRESH_TOKEN_TYPE,
                "jti": generate_token_id(),
            },
            self._settings.refresh_token_secret,
            self.refresh_ttl,
        )
        return TokenPair(access_token=access, refresh_token=refresh)

    async def issue(self, principal: Principal) -> TokenPair:
        """Mint a new pair and persist the refresh token's hash."""
        user_oid = parse_object_id(principal.user_id)
        if user_oid is None:
            raise ValueError(f"principal user_id is not an ObjectId: {principal.user_id!r}")

        pair = self._mint(principal)
        await self._refresh_tokens.insert(
            RefreshTokenDoc(
                user_id=user_oid,
                refresh_token_hash=await self._credentials.hash_async(pair.refresh_token),
                created_on=self._clock(),
            )
        )
        log.info(
            "token_pair_issued",
            user_id=principal.user_id,
            refresh_fingerprint=hash_token(pair.refresh_token)[:12],
        )
        return pair

    # ── Verification ─────────────────────────────────────────────────────────

    def _decode(self, token: Optional[str], secret: str, expected_type: str) -> Optional[dict]:
        """Decode and validate *token*; every failure collapses to ``None``."""
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self._settings.jwt_algorithm],
                issuer=self._settings.jwt_issuer,
                options=_DECODE_OPTIONS,
            )
        except jwt.PyJWTError:
            return None
        if claims.get("type") != expected_type:
            return None
        exp = claims.get("exp")
        if not isinstance(exp, int) or exp <= int(self._clock().timestamp()):
            return None
        return claims

    def verify_access(self, token: Optional[str]) -> Optional[Principal]:
        claims = self._decode(token, self._settings.access_token_secret, ACCESS_TOKEN_TYPE)
        if claims is None:
            return None
        try:
            return Principal(
                user_id=str(claims["sub"]),
                role=claims["role"],
                is_admin=bool(claims.get("is_admin", False)),
                user_name=claims.get("user_name") or "",
                email=claims.get("email") or "",
            )
        except (KeyError, ValueError, TypeError):
            return None

    def verify_refresh(self, token: Optional[str]) -> Optional[str]:
        """Return the user id a valid refresh token was issued to."""
        claims = self._decode(token, self._settings.refresh_token_secret, REFRESH_TOKEN_TYPE)
        if claims is None:
            return None
        return str(claims["sub"])

    # ── Rotation ─────────────────────────────────────────────────────────────

    async def rotate(
        self, refresh_token: Optional[str], principal: Principal
    ) -> Optional[TokenPair]:
        """Exchange *refresh_token* for a new pair, at most once.

        Denied (``None``) when the token is invalid, belongs to another
        principal, has no matching unconsumed record, or loses the consume
        race to a concurrent rotation.
        """
        user_id = self.verify_refresh(refresh_token)
        if user_id is None:
            return self._deny("invalid_refresh_token", principal.user_id)
        if user_id != principal.user_id:
            return self._deny("principal_mismatch", principal.user_id)

        user_oid = parse_object_id(user_id)
        record = await self._refresh_tokens.latest_active_for_user(user_oid)
        if record is None:
            return self._deny("no_active_record", user_id)
        if not await self._credentials.verify_async(refresh_token, record.refresh_token_hash):
            return self._deny("hash_mismatch", user_id)

        if not await self._refresh_tokens.mark_consumed(record.id, self._clock()):
            return self._deny("already_consumed", user_id)

        pair = await self.issue(principal)
        log.info("token_rotated", user_id=user_id, consumed_record=str(record.id))
        return pair

    @staticmethod
    def _deny(reason: str, user_id: str) -> None:
        log.warning("token_rotation_denied", reason=reason, user_id=user_id)
        return None
