"""
Account lifecycle: signup, email verification, login and password reset.

Every operation raises a typed ``AppError`` on failure; the route layer only
wraps successes in the response envelope.

Login never tells an unknown email apart from a wrong password. When the
email is unknown, a throwaway hash is still verified so both paths spend
the same argon2 time.
"""

from __future__ import annotations

from typing import Optional

from config import OtpSettings
from errors import (
    AuthError,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    InternalError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from repositories.user_repository import UserRepository
from schemas.models.otp import OtpPurpose
from schemas.models.principal import TokenPair
from schemas.models.user import UserDoc, new_user
from services.otp_service import OtpCheck, OtpService, OtpVerification
from services.token_service import TokenService
from shared.crypto import CredentialStore
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger
from shared.validators import (
    PASSWORD_PATTERN,
    normalize_email,
    validate_email,
    validate_otp_code,
    validate_password,
)

log = get_logger(__name__)

_THROTTLE_MESSAGES = {
    ErrorCode.LIMIT_EXCEED_TRY_IN_24HR: "limit exceed, please try again in 24hr",
    ErrorCode.LIMIT_EXCEED_TRY_IN_60MIN: "limit exceed, wait 60 minutes before sending another OTP",
    ErrorCode.LIMIT_EXCEED_TRY_IN_5MIN: "limit exceed, wait 5 minutes before sending another OTP",
}

_RESET_OTP_MESSAGES = {
    OtpCheck.NOT_FOUND: "invalid otp code, not found",
    OtpCheck.UTILIZED: "invalid otp code, already used",
    OtpCheck.EXPIRED: "invalid otp code, expired",
    OtpCheck.MISMATCHED: "invalid otp code, not matched",
}


def _checked_email(raw: str) -> str:
    email = normalize_email(raw)
    if not validate_email(email):
        raise ValidationError("email is not valid", error_code=ErrorCode.INVALID_EMAIL)
    return email


def _check_password(password: str) -> None:
    if not validate_password(password):
        raise ValidationError(
            f"password is not valid, password must match this pattern: {PASSWORD_PATTERN.pattern}",
            error_code=ErrorCode.INVALID_PASSWORD,
        )


def _check_otp_format(code: str) -> None:
    if not validate_otp_code(code):
        raise ValidationError(
            "otp must be exactly 6 digits", error_code=ErrorCode.INVALID_OTP
        )


def _invalid_otp(message: str = "invalid otp") -> ForbiddenError:
    return ForbiddenError(message, error_code=ErrorCode.INVALID_OTP)


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        otp_service: OtpService,
        token_service: TokenService,
        credentials: CredentialStore,
        email_provider: EmailProvider,
        otp_settings: OtpSettings,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._otps = otp_service
        self._tokens = token_service
        self._credentials = credentials
        self._email = email_provider
        self._otp_settings = otp_settings
        self._clock = clock
        self._dummy_hash: Optional[str] = None

    # ── Signup & email verification ──────────────────────────────────────────

    async def signup(self, user_name: str, email: str, password: str, role: str) -> UserDoc:
        """Create an unverified account and mail the first verification code."""
        _check_password(password)
        email = _checked_email(email)

        if await self._users.get_by_email(email) is not None:
            raise ConflictError("user already exist with this email")

        user = new_user(
            user_name=user_name,
            email=email,
            password_hash=await self._credentials.hash_async(password),
            role=role,
            created_on=self._clock(),
        )
        created = await self._users.create(user)
        if created is None:
            # Lost a concurrent signup race on the unique email index
            raise ConflictError("user already exist with this email")

        log.info("user_signed_up", user_id=str(created.id), role=created.role)
        await self._send_verification_code(created)
        return created

    async def send_email_otp(self, email: str) -> None:
        email = _checked_email(email)
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError("user not exist")
        if user.is_email_verified:
            raise ConflictError(
                "email is already verified, please login",
                error_code=ErrorCode.EMAIL_ALREADY_VERIFIED,
            )

        decision = await self._otps.check_throttle(email)
        if not decision.allowed:
            raise RateLimitError(
                _THROTTLE_MESSAGES[decision.error_code],
                error_code=decision.error_code,
                retry_after_seconds=int(decision.retry_after.total_seconds()),
            )

        await self._send_verification_code(user)

    async def _send_verification_code(self, user: UserDoc) -> None:
        code = await self._otps.issue(user.email, OtpPurpose.EMAIL_VERIFY)
        sent = await self._email.send_verification_email(
            user.email,
            user.user_name,
            code,
            self._otp_settings.email_otp_max_age_minutes,
        )
        if not sent:
            raise InternalError("server error, please try later")

    async def verify_email_otp(self, email: str, otp_code: str) -> None:
        email = _checked_email(email)
        _check_otp_format(otp_code)

        user = await self._users.get_by_email(email)
        if user is None or user.is_email_verified:
            raise _invalid_otp()

        result = await self._otps.verify(
            email,
            otp_code,
            self._otp_settings.email_otp_max_age_minutes,
            OtpPurpose.EMAIL_VERIFY,
        )
        if not result.matched:
            raise _invalid_otp()

        await self._users.mark_email_verified(user.id)
        log.info("email_verified", user_id=str(user.id))

    # ── Login ────────────────────────────────────────────────────────────────

    async def _burn_password_check(self, password: str) -> None:
        if self._dummy_hash is None:
            self._dummy_hash = await self._credentials.hash_async("not-a-real-password")
        await self._credentials.verify_async(password, self._dummy_hash)

    async def login(self, email: str, password: str) -> tuple[UserDoc, TokenPair]:
        """Check credentials and account state, then issue a token pair."""
        email = normalize_email(email)
        user = await self._users.get_by_email(email)

        if user is None:
            await self._burn_password_check(password)
            log.warning("login_failed", reason="unknown_email")
            raise AuthError(
                "email or password incorrect",
                error_code=ErrorCode.INVALID_EMAIL_OR_PASSWORD,
            )

        if not await self._credentials.verify_async(password, user.password_hash):
            log.warning("login_failed", reason="wrong_password", user_id=str(user.id))
            raise AuthError(
                "email or password incorrect",
                error_code=ErrorCode.INVALID_EMAIL_OR_PASSWORD,
            )

        if not user.is_email_verified:
            raise ForbiddenError("email not verified", error_code=ErrorCode.EMAIL_NOT_VERIFIED)
        if user.is_suspended:
            raise ForbiddenError("user is suspended", error_code=ErrorCode.USER_SUSPENDED)

        pair = await self._tokens.issue(user.to_principal())
        log.info("login_success", user_id=str(user.id), role=user.role)
        return user, pair

    # ── Password reset ───────────────────────────────────────────────────────

    async def forget_password(self, email: str) -> None:
        """Mail a password reset code. Issuance is not throttled."""
        email = _checked_email(email)
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError("user not exist")

        code = await self._otps.issue(user.email, OtpPurpose.PASSWORD_RESET)
        sent = await self._email.send_password_reset_email(
            user.email,
            user.user_name,
            code,
            self._otp_settings.password_reset_otp_max_age_minutes,
        )
        if not sent:
            raise InternalError("server error, please try later")

    async def _verify_reset_code(
        self, email: str, otp_code: str
    ) -> tuple[UserDoc, OtpVerification]:
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError("user not exist")

        result = await self._otps.verify(
            email,
            otp_code,
            self._otp_settings.password_reset_otp_max_age_minutes,
            OtpPurpose.PASSWORD_RESET,
        )
        if not result.matched:
            raise _invalid_otp(_RESET_OTP_MESSAGES[result.outcome])
        return user, result

    async def forget_password_verify_otp(self, email: str, otp_code: str) -> None:
        """Check a reset code without consuming it."""
        email = _checked_email(email)
        _check_otp_format(otp_code)
        await self._verify_reset_code(email, otp_code)

    async def forget_password_complete(
        self, email: str, otp_code: str, new_password: str
    ) -> None:
        """Consume the reset code and replace the password hash.

        Every input is validated before the code is consumed, so a bad new
        password leaves the code usable for a retry.
        """
        email = _checked_email(email)
        _check_password(new_password)
        _check_otp_format(otp_code)

        user, result = await self._verify_reset_code(email, otp_code)
        new_hash = await self._credentials.hash_async(new_password)

        if not await self._otps.consume(result.record_id):
            raise _invalid_otp(_RESET_OTP_MESSAGES[OtpCheck.UTILIZED])

        await self._users.update_password_hash(user.id, new_hash)
        log.info("password_reset_completed", user_id=str(user.id))

