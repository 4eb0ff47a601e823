"""
One-time code document models.

EmailOtpDoc         → otps                  (email verification codes)
PasswordResetOtpDoc → forget-password-otps  (password reset codes)

Only an argon2 hash of the code is stored. Email OTPs are never mutated after
insert; password reset OTPs flip `is_utilized` exactly once, when the reset
completes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from schemas.models.base import MongoBaseModel


class OtpPurpose(str, Enum):
    EMAIL_VERIFY = "email_verify"
    PASSWORD_RESET = "password_reset"


class EmailOtpDoc(MongoBaseModel):
    """Document model for the `otps` collection."""

    medium: str = "email"
    email: str
    otp_code_hash: str
    created_on: datetime


class PasswordResetOtpDoc(MongoBaseModel):
    """Document model for the `forget-password-otps` collection."""

    email: str
    otp_code_hash: str
    is_utilized: bool = False
    created_on: datetime
    utilized_on: Optional[datetime] = None
