"""Event registrations: register, record participation, cancel."""

from __future__ import annotations

from bson import ObjectId

from errors import ErrorCode, ForbiddenError, NotFoundError, ValidationError
from repositories.event_repository import EventRepository, RegistrationRepository
from repositories.user_repository import UserRepository
from schemas.models.base import parse_object_id
from schemas.models.principal import Principal
from schemas.models.registration import (
    REGISTRATION_STATUS_COMPLETED,
    REGISTRATION_STATUS_DRAFT,
    EventRegistrationDoc,
)
from services.event_service import parse_event_id
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger

log = get_logger(__name__)


class RegistrationService:
    def __init__(
        self,
        registrations: RegistrationRepository,
        events: EventRepository,
        users: UserRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._registrations = registrations
        self._events = events
        self._users = users
        self._clock = clock

    async def register(self, principal: Principal, event_id: str) -> EventRegistrationDoc:
        event = await self._events.get_by_id(parse_event_id(event_id))
        if event is None:
            raise NotFoundError("event not found", error_code=ErrorCode.EVENT_NOT_EXIST)

        user_oid = ObjectId(principal.user_id)
        registration = await self._registrations.insert(
            EventRegistrationDoc(
                event=event.id,
                participant=user_oid,
                status=REGISTRATION_STATUS_DRAFT,
                created_on=self._clock(),
            )
        )
        await self._users.add_organizer(user_oid, event.organizer)
        await self._events.add_participant(event.id, user_oid)

        log.info(
            "event_registration_created",
            registration_id=str(registration.id),
            event_id=event_id,
            user_id=principal.user_id,
        )
        return registration

    async def _get_own_registration(
        self, principal: Principal, registration_id: str
    ) -> EventRegistrationDoc:
        oid = parse_object_id(registration_id)
        if oid is None:
            raise ValidationError(
                "invalid registration id", error_code=ErrorCode.INVALID_REGISTRATION_ID
            )
        registration = await self._registrations.get_by_id(oid)
        if registration is None:
            raise NotFoundError(
                "registration not found", error_code=ErrorCode.REGISTRATION_NOT_EXIST
            )
        if str(registration.participant) != principal.user_id:
            raise ForbiddenError("registration belongs to another user")
        return registration

    async def participate(self, principal: Principal, registration_id: str) -> None:
        registration = await self._get_own_registration(principal, registration_id)
        if not registration.is_paid:
            raise ForbiddenError("not allowed, first complete the payment")
        await self._registrations.mark_participated(
            registration.id, REGISTRATION_STATUS_COMPLETED
        )
        log.info("event_participation_recorded", registration_id=registration_id)

    async def cancel(self, principal: Principal, registration_id: str) -> None:
        registration = await self._get_own_registration(principal, registration_id)
        await self._registrations.delete(registration.id)
        await self._events.remove_participant(registration.event, registration.participant)
        log.info("event_registration_cancelled", registration_id=registration_id)
