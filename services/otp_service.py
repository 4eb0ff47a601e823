"""
One-time code issuance, throttling and verification.

Codes are six random digits. Only their argon2 hash is persisted, in the
email-verification or password-reset collection depending on purpose.

Email verification sends are throttled by a sliding count-and-recency gate
over the last 24 hours (see ``THROTTLE_RULES``). Password reset issuance is
not throttled.

Verification never consumes a code. Password reset codes are consumed with
``consume()`` by the caller once the rest of the reset request has been
validated, so any earlier failure leaves the code usable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from bson import ObjectId

from errors import ErrorCode
from repositories.otp_repository import EmailOtpRepository, PasswordResetOtpRepository
from schemas.models.otp import EmailOtpDoc, OtpPurpose, PasswordResetOtpDoc
from shared.crypto import CredentialStore
from shared.datetime_utils import (
    Clock,
    ensure_utc,
    utcnow,
    whole_minutes_between,
)
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)

THROTTLE_LOOKBACK = timedelta(hours=24)
THROTTLE_MAX_RECORDS = 3


@dataclass(frozen=True)
class ThrottleRule:
    """Blocks when exactly/at least ``count`` recent codes exist and the
    newest is at most ``max_newest_age_minutes`` old (None = any age)."""

    count: int
    at_least: bool
    max_newest_age_minutes: Optional[int]
    wait: timedelta
    error_code: ErrorCode

    def matches(self, recent: int, newest_age_minutes: int) -> bool:
        if self.at_least:
            if recent < self.count:
                return False
        elif recent != self.count:
            return False
        if self.max_newest_age_minutes is None:
            return True
        return newest_age_minutes <= self.max_newest_age_minutes


# Evaluated top to bottom; the first matching rule wins.
THROTTLE_RULES: tuple[ThrottleRule, ...] = (
    ThrottleRule(3, True, None, timedelta(hours=24), ErrorCode.LIMIT_EXCEED_TRY_IN_24HR),
    ThrottleRule(2, False, 60, timedelta(minutes=60), ErrorCode.LIMIT_EXCEED_TRY_IN_60MIN),
    ThrottleRule(1, False, 5, timedelta(minutes=5), ErrorCode.LIMIT_EXCEED_TRY_IN_5MIN),
)


@dataclass(frozen=True)
class ThrottleDecision:
    allowed: bool
    error_code: Optional[ErrorCode] = None
    window: Optional[timedelta] = None
    retry_after: Optional[timedelta] = None


class OtpCheck(str, Enum):
    MATCHED = "matched"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCHED = "mismatched"
    UTILIZED = "utilized"


@dataclass(frozen=True)
class OtpVerification:
    outcome: OtpCheck
    record_id: Optional[ObjectId] = None

    @property
    def matched(self) -> bool:
        return self.outcome is OtpCheck.MATCHED


OtpRecord = Union[EmailOtpDoc, PasswordResetOtpDoc]


class OtpService:
    def __init__(
        self,
        email_otps: EmailOtpRepository,
        reset_otps: PasswordResetOtpRepository,
        credentials: CredentialStore,
        clock: Clock = utcnow,
    ) -> None:
        self._email_otps = email_otps
        self._reset_otps = reset_otps
        self._credentials = credentials
        self._clock = clock

    @staticmethod
    def generate() -> str:
        return generate_otp_code()

    async def issue(self, email: str, purpose: OtpPurpose) -> str:
        """Create and persist a new code for *email*; returns the plaintext."""
        code = self.generate()
        code_hash = await self._credentials.hash_async(code)
        now = self._clock()

        if purpose is OtpPurpose.EMAIL_VERIFY:
            record = await self._email_otps.insert(
                EmailOtpDoc(email=email, otp_code_hash=code_hash, created_on=now)
            )
        else:
            record = await self._reset_otps.insert(
                PasswordResetOtpDoc(email=email, otp_code_hash=code_hash, created_on=now)
            )

        log.info("otp_issued", purpose=purpose.value, otp_id=str(record.id))
        return code

    async def check_throttle(self, email: str) -> ThrottleDecision:
        """Apply the email-verification send throttle for *email*."""
        now = self._clock()
        recent = await self._email_otps.recent_for_email(
            email, since=now - THROTTLE_LOOKBACK, limit=THROTTLE_MAX_RECORDS
        )
        if not recent:
            return ThrottleDecision(allowed=True)

        newest_created = recent[0].created_on
        newest_age = whole_minutes_between(newest_created, now)

        for rule in THROTTLE_RULES:
            if rule.matches(len(recent), newest_age):
                retry_after = max(
                    rule.wait - (ensure_utc(now) - ensure_utc(newest_created)), timedelta(0)
                )
                log.warning(
                    "otp_send_throttled",
                    recent_count=len(recent),
                    newest_age_minutes=newest_age,
                    error_code=rule.error_code.value,
                )
                return ThrottleDecision(
                    allowed=False,
                    error_code=rule.error_code,
                    window=rule.wait,
                    retry_after=retry_after,
                )
        return ThrottleDecision(allowed=True)

    async def verify(
        self,
        email: str,
        submitted_code: str,
        max_age_minutes: int,
        purpose: OtpPurpose,
    ) -> OtpVerification:
        """Check *submitted_code* against the newest code issued for *email*.

        Age and hash are independent checks and both must pass. For password
        reset, a newest code that was already used fails as ``UTILIZED``.
        """
        record: Optional[OtpRecord]
        if purpose is OtpPurpose.EMAIL_VERIFY:
            record = await self._email_otps.latest_for_email(email)
        else:
            record = await self._reset_otps.latest_for_email(email)

        if record is None:
            return self._fail(purpose, OtpCheck.NOT_FOUND)

        if isinstance(record, PasswordResetOtpDoc) and record.is_utilized:
            return self._fail(purpose, OtpCheck.UTILIZED)

        if whole_minutes_between(record.created_on, self._clock()) > max_age_minutes:
            return self._fail(purpose, OtpCheck.EXPIRED)

        if not await self._credentials.verify_async(submitted_code, record.otp_code_hash):
            return self._fail(purpose, OtpCheck.MISMATCHED)

        return OtpVerification(OtpCheck.MATCHED, record.id)

    async def consume(self, record_id: ObjectId) -> bool:
        """Mark a password reset code as used. False if it already was."""
        consumed = await self._reset_otps.mark_utilized(record_id, self._clock())
        if not consumed:
            log.warning("otp_consume_lost_race", otp_id=str(record_id))
        return consumed

    @staticmethod
    def _fail(purpose: OtpPurpose, outcome: OtpCheck) -> OtpVerification:
        log.warning("otp_verification_failed", purpose=purpose.value, reason=outcome.value)
        return OtpVerification(outcome)

