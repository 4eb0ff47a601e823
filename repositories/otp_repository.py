"""
OTP collections access.

Both collections are read newest-first by ``created_on`` (with ``_id`` as a
tie-breaker, since ObjectIds grow monotonically per process).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pymongo import DESCENDING

from repositories.base import BaseRepository
from schemas.models.otp import EmailOtpDoc, PasswordResetOtpDoc

_NEWEST_FIRST = [("created_on", DESCENDING), ("_id", DESCENDING)]


class EmailOtpRepository(BaseRepository[EmailOtpDoc]):
    collection_name = "otps"
    model = EmailOtpDoc

    async def latest_for_email(self, email: str) -> Optional[EmailOtpDoc]:
        raw = await self._col.find_one({"email": email}, sort=_NEWEST_FIRST)
        return self._to_model(raw)

    async def recent_for_email(
        self, email: str, since: datetime, limit: int
    ) -> list[EmailOtpDoc]:
        """Newest-first OTPs for *email* created at or after *since*."""
        cursor = (
            self._col.find({"email": email, "created_on": {"$gte": since}})
            .sort(_NEWEST_FIRST)
            .limit(limit)
        )
        return [self.model.model_validate(raw) async for raw in cursor]


class PasswordResetOtpRepository(BaseRepository[PasswordResetOtpDoc]):
    collection_name = "forget-password-otps"
    model = PasswordResetOtpDoc

    async def latest_for_email(self, email: str) -> Optional[PasswordResetOtpDoc]:
        raw = await self._col.find_one({"email": email}, sort=_NEWEST_FIRST)
        return self._to_model(raw)

    async def mark_utilized(self, otp_id: Any, when: datetime) -> bool:
        return await self._set_flag_once(otp_id, "is_utilized", {"utilized_on": when})
