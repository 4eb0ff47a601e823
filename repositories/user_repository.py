"""Users collection access."""

from __future__ import annotations

from typing import Any, Optional

from pymongo.errors import DuplicateKeyError

from repositories.base import BaseRepository
from schemas.models.user import UserDoc


class UserRepository(BaseRepository[UserDoc]):
    collection_name = "users"
    model = UserDoc

    async def get_by_email(self, email: str) -> Optional[UserDoc]:
        """Look up by an already-normalized email."""
        return self._to_model(await self._col.find_one({"email": email}))

    async def create(self, user: UserDoc) -> Optional[UserDoc]:
        """Insert *user*; returns ``None`` if the email is already taken."""
        try:
            return await self.insert(user)
        except DuplicateKeyError:
            return None

    async def mark_email_verified(self, user_id: Any) -> bool:
        result = await self._col.update_one(
            {"_id": user_id, "is_email_verified": False},
            {"$set": {"is_email_verified": True}},
        )
        return result.modified_count == 1

    async def update_password_hash(self, user_id: Any, password_hash: str) -> bool:
        result = await self._col.update_one(
            {"_id": user_id}, {"$set": {"password_hash": password_hash}}
        )
        return result.matched_count == 1

    async def add_organizer(self, user_id: Any, organizer_id: Any) -> None:
        await self._col.update_one(
            {"_id": user_id}, {"$addToSet": {"organizers": organizer_id}}
        )
