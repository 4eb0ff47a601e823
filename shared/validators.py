"""
Input validators — framework-agnostic, pure functions.

Patterns are shared by the request handlers and the document factories so a
value that passes at the edge is never rejected again at persistence time.
"""

from __future__ import annotations

import re
from typing import Optional

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9!#$%&'*+,\-./=?^_`{|}~]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,4}$"
)
# 6-100 chars, at least one uppercase, one lowercase and one digit
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Z])(?=.*[a-z])(?=.*\d).{6,100}$")
OTP_PATTERN = re.compile(r"^[0-9]{6}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

ROLE_USER = "user"
ROLE_ORGANIZER = "organizer"
ROLES = frozenset({ROLE_USER, ROLE_ORGANIZER})

EVENT_TYPE_ONLINE = "online"
EVENT_TYPE_ONSITE = "onsite"
EVENT_TYPES = frozenset({EVENT_TYPE_ONLINE, EVENT_TYPE_ONSITE})

EMAIL_MIN_LENGTH = 3
EMAIL_MAX_LENGTH = 100
USER_NAME_MAX_LENGTH = 50


def normalize_email(email: Optional[str]) -> str:
    """Trim and lowercase *email*; every lookup and write goes through this."""
    return (email or "").strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* (already normalized) is well formed."""
    if not (EMAIL_MIN_LENGTH <= len(email) <= EMAIL_MAX_LENGTH):
        return False
    return bool(EMAIL_PATTERN.match(email))


def validate_password(password: str) -> bool:
    """Return True if *password* meets the strength rules.

    Rules:
    - 6 to 100 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    """
    return bool(PASSWORD_PATTERN.match(password or ""))


def validate_otp_code(code: str) -> bool:
    """Return True if *code* is exactly six decimal digits."""
    return bool(OTP_PATTERN.match(code or ""))


def validate_role(role: str) -> bool:
    return role in ROLES


def validate_event_type(event_type: str) -> bool:
    return event_type in EVENT_TYPES


def validate_time_of_day(value: str) -> bool:
    """Return True for a 24h ``HH:MM`` string."""
    return bool(TIME_PATTERN.match(value or ""))
