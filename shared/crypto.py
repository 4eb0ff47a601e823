"""
Cryptographic helpers — secret hashing and cookie signing.

CredentialStore wraps argon2id (via argon2-cffi) and is used for every secret
the service persists: passwords, OTP codes and refresh tokens. Nothing is
stored in plaintext.

SHA-256 ``hash_token`` is only used for non-secret fingerprints (log
correlation), and HMAC-SHA256 signs transport cookies.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import hmac
from typing import Optional

from argon2 import PasswordHasher

_COOKIE_PREFIX = "s:"


class CredentialStore:
    """One-way salted, cost-factored hashing for passwords and one-time secrets.

    Hashes are non-deterministic (the salt is embedded in the encoded hash),
    so two calls on the same input never produce the same string.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, secret: str) -> str:
        """Hash *secret* with argon2id.

        Returns:
            Argon2 hash string (includes algorithm parameters and salt).
        """
        return self._hasher.hash(secret)

    def verify(self, secret: str, secret_hash: str) -> bool:
        """Verify *secret* against an argon2 *secret_hash*.

        Returns:
            ``True`` if the secret matches, ``False`` for any failure
            (mismatch, malformed hash, empty input, etc.).
        """
        if not secret or not secret_hash:
            return False
        try:
            return self._hasher.verify(secret_hash, secret)
        except Exception:
            return False

    async def hash_async(self, secret: str) -> str:
        """Hash on a worker thread; argon2 is deliberately slow."""
        return await asyncio.to_thread(self.hash, secret)

    async def verify_async(self, secret: str, secret_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, secret, secret_hash)


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Used for stable, non-reversible fingerprints in logs.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _cookie_signature(value: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def sign_cookie_value(value: str, secret: str) -> str:
    """Return ``s:<value>.<signature>`` for storage in a signed cookie."""
    return f"{_COOKIE_PREFIX}{value}.{_cookie_signature(value, secret)}"


def unsign_cookie_value(signed: Optional[str], secret: str) -> Optional[str]:
    """Return the original value of a signed cookie, or ``None`` if tampered.

    Unsigned or malformed values are rejected rather than passed through.
    """
    if not signed or not signed.startswith(_COOKIE_PREFIX):
        return None
    body = signed[len(_COOKIE_PREFIX):]
    value, sep, signature = body.rpartition(".")
    if not sep or not value:
        return None
    expected = _cookie_signature(value, secret)
    if not hmac.compare_digest(expected, signature):
        return None
    return value
