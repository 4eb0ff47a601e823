"""
Event document model.

Maps to the `events` MongoDB collection.

Invariants enforced by the factories below, before any write:
- end_date is strictly after start_date
- onsite events carry a non-empty location; online events carry none
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from errors import ErrorCode, ValidationError
from schemas.models.base import MongoBaseModel, PyObjectId
from shared.datetime_utils import combine_date_and_time
from shared.validators import (
    EVENT_TYPE_ONLINE,
    EVENT_TYPE_ONSITE,
    validate_event_type,
    validate_time_of_day,
)


class EventDoc(MongoBaseModel):
    """Document model for the `events` collection."""

    title: str
    description: str
    start_date: datetime
    end_date: datetime
    event_type: str
    price: str
    location: Optional[str] = None
    organizer: PyObjectId
    participants: list[PyObjectId] = []
    created_on: Optional[datetime] = None


def _event_window(day: str, start_time: str, end_time: str) -> tuple[datetime, datetime]:
    if not validate_time_of_day(start_time) or not validate_time_of_day(end_time):
        raise ValidationError(
            "startTime and endTime must be HH:MM", error_code=ErrorCode.INVALID_DATE
        )
    start = combine_date_and_time(day, start_time)
    end = combine_date_and_time(day, end_time)
    if start is None or end is None:
        raise ValidationError("date must be YYYY-MM-DD", error_code=ErrorCode.INVALID_DATE)
    if end <= start:
        raise ValidationError(
            "end time must be after start time", error_code=ErrorCode.INVALID_DATE
        )
    return start, end


def _resolve_location(event_type: str, location: Optional[str]) -> Optional[str]:
    if not validate_event_type(event_type):
        raise ValidationError(
            "invalid event type value", error_code=ErrorCode.INVALID_EVENT_TYPE
        )
    if event_type == EVENT_TYPE_ONLINE:
        return None
    location = (location or "").strip()
    if not location:
        raise ValidationError(
            "required field location missing",
            error_code=ErrorCode.REQUIRED_PARAMETER_MISSING,
        )
    return location


def new_event(
    *,
    title: str,
    description: str,
    day: str,
    start_time: str,
    end_time: str,
    event_type: str,
    price: str,
    location: Optional[str],
    organizer: PyObjectId,
    created_on: datetime,
) -> EventDoc:
    """Validate organizer input and build an EventDoc ready for insert."""
    location = _resolve_location(event_type, location)
    start, end = _event_window(day, start_time, end_time)
    return EventDoc(
        title=title.strip(),
        description=description,
        start_date=start,
        end_date=end,
        event_type=event_type,
        price=price,
        location=location,
        organizer=organizer,
        created_on=created_on,
    )


def build_event_update(
    event: EventDoc,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    price: Optional[str] = None,
    event_type: Optional[str] = None,
    location: Optional[str] = None,
    day: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> dict[str, Any]:
    """Return the ``$set`` payload for a partial event update.

    Changing either time requires ``day``. A new ``day`` alone moves the
    event while keeping its current start and end times of day.
    """
    if (start_time or end_time) and not day:
        raise ValidationError(
            "date is required when changing start or end time",
            error_code=ErrorCode.DATE_FIELD_MISSING,
        )

    update: dict[str, Any] = {}
    if title:
        update["title"] = title.strip()
    if description:
        update["description"] = description
    if price:
        update["price"] = price
    if event_type:
        update["event_type"] = event_type
        update["location"] = _resolve_location(event_type, location)
    elif location and event.event_type == EVENT_TYPE_ONSITE:
        update["location"] = location.strip()

    if day:
        start, end = _event_window(
            day,
            start_time or event.start_date.strftime("%H:%M"),
            end_time or event.end_date.strftime("%H:%M"),
        )
        update["start_date"] = start
        update["end_date"] = end

    return update
