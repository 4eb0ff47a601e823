"""
Event reads for every authenticated user and CRUD for organizers.

Organizers may only read, edit or delete events they organize; anything
else is ``NOT_ALLOWED``.
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId

from errors import ErrorCode, ForbiddenError, NotFoundError, ValidationError
from repositories.event_repository import EventRepository
from schemas.dto.requests.event import CreateEventRequest, UpdateEventRequest
from schemas.models.base import parse_object_id
from schemas.models.event import EventDoc, build_event_update, new_event
from schemas.models.principal import Principal
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger

log = get_logger(__name__)


def parse_event_id(event_id: str) -> ObjectId:
    oid = parse_object_id(event_id)
    if oid is None:
        raise ValidationError("invalid event id", error_code=ErrorCode.INVALID_EVENT_ID)
    return oid


class EventService:
    def __init__(self, events: EventRepository, clock: Clock = utcnow) -> None:
        self._events = events
        self._clock = clock

    async def list_events(self) -> list[EventDoc]:
        return await self._events.list_all()

    async def get_event(self, event_id: str) -> EventDoc:
        event = await self._events.get_by_id(parse_event_id(event_id))
        if event is None:
            raise NotFoundError("event not found", error_code=ErrorCode.EVENT_NOT_EXIST)
        return event

    async def list_organizer_events(self, organizer: Principal) -> list[EventDoc]:
        return await self._events.list_by_organizer(ObjectId(organizer.user_id))

    async def get_owned_event(self, organizer: Principal, event_id: str) -> EventDoc:
        event = await self.get_event(event_id)
        if str(event.organizer) != organizer.user_id:
            log.warning(
                "event_access_denied",
                event_id=event_id,
                user_id=organizer.user_id,
            )
            raise ForbiddenError("event belongs to another organizer")
        return event

    async def create_event(self, organizer: Principal, body: CreateEventRequest) -> EventDoc:
        event = new_event(
            title=body.title,
            description=body.description,
            day=body.date,
            start_time=body.start_time,
            end_time=body.end_time,
            event_type=body.event_type,
            price=body.price,
            location=body.location,
            organizer=ObjectId(organizer.user_id),
            created_on=self._clock(),
        )
        created = await self._events.insert(event)
        log.info("event_created", event_id=str(created.id), organizer=organizer.user_id)
        return created

    async def update_event(
        self, organizer: Principal, event_id: str, body: UpdateEventRequest
    ) -> Optional[EventDoc]:
        event = await self.get_owned_event(organizer, event_id)
        fields = build_event_update(
            event,
            title=body.title,
            description=body.description,
            price=body.price,
            event_type=body.event_type,
            location=body.location,
            day=body.date,
            start_time=body.start_time,
            end_time=body.end_time,
        )
        updated = await self._events.update(event.id, fields)
        log.info("event_updated", event_id=event_id, fields=sorted(fields))
        return updated

    async def delete_event(self, organizer: Principal, event_id: str) -> None:
        event = await self.get_owned_event(organizer, event_id)
        await self._events.delete(event.id)
        log.info("event_deleted", event_id=event_id, organizer=organizer.user_id)
