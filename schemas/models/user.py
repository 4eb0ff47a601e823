"""
User document model.

Maps to the `users` MongoDB collection.

`email` is stored trimmed and lowercased; the unique index on it is the
source of truth for "one account per address". `new_user()` is the only
creation path and runs all normalization/validation before the insert.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from errors import ErrorCode, ValidationError
from schemas.models.base import MongoBaseModel, PyObjectId
from schemas.models.principal import Principal
from shared.validators import (
    USER_NAME_MAX_LENGTH,
    normalize_email,
    validate_email,
    validate_role,
)


class UserDoc(MongoBaseModel):
    """
    Document model for the `users` collection.

    role values: "user" | "organizer"
    organizers lists the organizers of events this user registered to.
    """

    user_name: str = ""
    email: str
    password_hash: str
    role: str
    is_suspended: bool = False
    is_email_verified: bool = False
    is_admin: bool = False
    organizers: list[PyObjectId] = []
    created_on: Optional[datetime] = None

    def to_principal(self) -> Principal:
        return Principal(
            user_id=str(self.id),
            role=self.role,
            is_admin=self.is_admin,
            user_name=self.user_name,
            email=self.email,
        )

    def to_profile(self) -> dict:
        """Public profile returned by login."""
        return {
            "id": str(self.id),
            "userName": self.user_name,
            "email": self.email,
            "role": self.role,
            "isAdmin": self.is_admin,
        }


def new_user(
    *,
    user_name: str,
    email: str,
    password_hash: str,
    role: str,
    created_on: datetime,
) -> UserDoc:
    """Validate and normalize signup data into a UserDoc ready for insert."""
    email = normalize_email(email)
    if not validate_email(email):
        raise ValidationError("email is not valid", error_code=ErrorCode.INVALID_EMAIL)
    if not validate_role(role):
        raise ValidationError("invalid user role", error_code=ErrorCode.INVALID_ROLE)
    user_name = (user_name or "").strip()
    if len(user_name) > USER_NAME_MAX_LENGTH:
        raise ValidationError(
            f"userName must be at most {USER_NAME_MAX_LENGTH} characters",
            error_code=ErrorCode.REQUIRED_PARAMETER_MISSING,
        )
    return UserDoc(
        user_name=user_name,
        email=email,
        password_hash=password_hash,
        role=role,
        created_on=created_on,
    )
