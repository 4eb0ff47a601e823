"""
Request DTOs for event endpoints.

CreateEventRequest — POST /event
UpdateEventRequest — PUT /event/{event_id}

``date`` is ``YYYY-MM-DD``; ``startTime``/``endTime`` are ``HH:MM`` (UTC).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateEventRequest(BaseModel):
    """Request body for POST /event."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    date: str = Field(min_length=1)
    start_time: str = Field(alias="startTime", min_length=1)
    end_time: str = Field(alias="endTime", min_length=1)
    event_type: str = Field(alias="eventType", min_length=1)
    price: str = Field(min_length=1)
    location: Optional[str] = None


class UpdateEventRequest(BaseModel):
    """Request body for PUT /event/{event_id}. Every field is optional."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    event_type: Optional[str] = Field(default=None, alias="eventType")
    price: Optional[str] = None
    location: Optional[str] = None
