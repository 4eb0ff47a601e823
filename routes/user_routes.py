"""
Endpoints for any signed-in user.

GET    /events
GET    /event/{event_id}
POST   /event/{event_id}/register
PUT    /event-registrations/{registration_id}/participate
DELETE /event-registrations/{registration_id}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_event_service, get_registration_service
from middleware.session import get_principal
from schemas.dto.responses.common import ApiResponse, ok
from schemas.models.principal import Principal
from services.event_service import EventService
from services.registration_service import RegistrationService

router = APIRouter(tags=["events"])

_envelope = {"response_model": ApiResponse, "response_model_exclude_none": True}


@router.get("/events", **_envelope)
async def list_events(
    principal: Principal = Depends(get_principal),
    events: EventService = Depends(get_event_service),
) -> ApiResponse:
    found = await events.list_events()
    return ok("events fetched successfully", data=[e.to_public() for e in found])


@router.get("/event/{event_id}", **_envelope)
async def get_event(
    event_id: str,
    principal: Principal = Depends(get_principal),
    events: EventService = Depends(get_event_service),
) -> ApiResponse:
    event = await events.get_event(event_id)
    return ok("event", data=event.to_public())


@router.post("/event/{event_id}/register", **_envelope)
async def register_for_event(
    event_id: str,
    principal: Principal = Depends(get_principal),
    registrations: RegistrationService = Depends(get_registration_service),
) -> ApiResponse:
    registration = await registrations.register(principal, event_id)
    return ok("participation created successfully", data=registration.to_public())


@router.put("/event-registrations/{registration_id}/participate", **_envelope)
async def participate(
    registration_id: str,
    principal: Principal = Depends(get_principal),
    registrations: RegistrationService = Depends(get_registration_service),
) -> ApiResponse:
    await registrations.participate(principal, registration_id)
    return ok("participated successfully")


@router.delete("/event-registrations/{registration_id}", **_envelope)
async def cancel_registration(
    registration_id: str,
    principal: Principal = Depends(get_principal),
    registrations: RegistrationService = Depends(get_registration_service),
) -> ApiResponse:
    await registrations.cancel(principal, registration_id)
    return ok("registration cancelled successfully")
