"""Refresh token records: insert, newest-unconsumed lookup, consume."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pymongo import DESCENDING

from repositories.base import BaseRepository
from schemas.models.token import RefreshTokenDoc


class RefreshTokenRepository(BaseRepository[RefreshTokenDoc]):
    collection_name = "refresh-tokens"
    model = RefreshTokenDoc

    async def latest_active_for_user(self, user_id: Any) -> Optional[RefreshTokenDoc]:
        raw = await self._col.find_one(
            {"user_id": user_id, "is_consumed": False},
            sort=[("created_on", DESCENDING), ("_id", DESCENDING)],
        )
        return self._to_model(raw)

    async def mark_consumed(self, token_id: Any, when: datetime) -> bool:
        return await self._set_flag_once(token_id, "is_consumed", {"consumed_on": when})
