"""
Organizer-only event management.

GET    /my-events
POST   /event
GET    /my-event/{event_id}
PUT    /event/{event_id}
DELETE /event/{event_id}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_event_service
from middleware.authorization import require_role
from schemas.dto.requests.event import CreateEventRequest, UpdateEventRequest
from schemas.dto.responses.common import ApiResponse, ok
from schemas.models.principal import Principal
from services.event_service import EventService
from shared.validators import ROLE_ORGANIZER

router = APIRouter(tags=["organizer"])

require_organizer = require_role(ROLE_ORGANIZER)

_envelope = {"response_model": ApiResponse, "response_model_exclude_none": True}


@router.get("/my-events", **_envelope)
async def list_my_events(
    organizer: Principal = Depends(require_organizer),
    events: EventService = Depends(get_event_service),
) -> ApiResponse:
    found = await events.list_organizer_events(organizer)
    return ok("events fetched successfully", data=[e.to_public() for e in found])


@router.post("/event", **_envelope)
async def create_event(
    body: CreateEventRequest,
    organizer: Principal = Depends(require_organizer),
    events: EventService = Depends(get_event_service),
) -> ApiResponse:
    event = await events.create_event(organizer, body)
    return ok("event created successfully", data=event.to_public())


@router.get("/my-event/{event_id}", **_envelope)
async def get_my_event(
    event_id: str,
    organizer: Principal = Depends(require_organizer),
    events: EventService = Depends(get_event_service),
) -> ApiResponse:
    event = await events.get_owned_event(organizer, event_id)
    return ok("event", data=event.to_public())


@router.put("/event/{event_id}", **_envelope)
async def update_event(
    event_id: str,
    body: UpdateEventRequest,
    organizer: Principal = Depends(require_organizer),
    events: EventService = Depends(get_event_service),
) -> ApiResponse:
    event = await events.update_event(organizer, event_id, body)
    return ok("event updated successfully", data=event.to_public() if event else None)


@router.delete("/event/{event_id}", **_envelope)
async def delete_event(
    event_id: str,
    organizer: Principal = Depends(require_organizer),
    events: EventService = Depends(get_event_service),
) -> ApiResponse:
    await events.delete_event(organizer, event_id)
    return ok("event deleted successfully")
