"""
Event registration document model.

Maps to the `registrations` MongoDB collection.

status values: draft | completed
Participation can only be recorded once the registration is paid.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel, PyObjectId

REGISTRATION_STATUS_DRAFT = "draft"
REGISTRATION_STATUS_COMPLETED = "completed"


class EventRegistrationDoc(MongoBaseModel):
    """Document model for the `registrations` collection."""

    event: PyObjectId
    participant: PyObjectId
    is_paid: bool = False
    is_participated: bool = False
    status: str = REGISTRATION_STATUS_DRAFT
    created_on: Optional[datetime] = None
