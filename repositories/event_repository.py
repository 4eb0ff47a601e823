"""Events and registrations collections access."""

from __future__ import annotations

from typing import Any, Optional

from pymongo import ASCENDING, DESCENDING

from repositories.base import BaseRepository
from schemas.models.event import EventDoc
from schemas.models.registration import EventRegistrationDoc


class EventRepository(BaseRepository[EventDoc]):
    collection_name = "events"
    model = EventDoc

    async def list_all(self) -> list[EventDoc]:
        cursor = self._col.find({}).sort("start_date", ASCENDING)
        return [self.model.model_validate(raw) async for raw in cursor]

    async def list_by_organizer(self, organizer_id: Any) -> list[EventDoc]:
        cursor = self._col.find({"organizer": organizer_id}).sort(
            "created_on", DESCENDING
        )
        return [self.model.model_validate(raw) async for raw in cursor]

    async def update(self, event_id: Any, fields: dict) -> Optional[EventDoc]:
        if fields:
            await self._col.update_one({"_id": event_id}, {"$set": fields})
        return await self.get_by_id(event_id)

    async def add_participant(self, event_id: Any, user_id: Any) -> None:
        await self._col.update_one(
            {"_id": event_id}, {"$addToSet": {"participants": user_id}}
        )

    async def remove_participant(self, event_id: Any, user_id: Any) -> None:
        await self._col.update_one(
            {"_id": event_id}, {"$pull": {"participants": user_id}}
        )

    async def delete(self, event_id: Any) -> bool:
        result = await self._col.delete_one({"_id": event_id})
        return result.deleted_count == 1


class RegistrationRepository(BaseRepository[EventRegistrationDoc]):
    collection_name = "registrations"
    model = EventRegistrationDoc

    async def mark_participated(self, registration_id: Any, status: str) -> bool:
        result = await self._col.update_one(
            {"_id": registration_id},
            {"$set": {"is_participated": True, "status": status}},
        )
        return result.matched_count == 1

    async def delete(self, registration_id: Any) -> bool:
        result = await self._col.delete_one({"_id": registration_id})
        return result.deleted_count == 1
