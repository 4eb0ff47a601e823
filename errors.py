"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. Every error carries a stable
``ErrorCode`` that clients branch on; the message text is informational only.
The global exception handler converts AppError subclasses to the standard
``{message, errorCode, data?}`` envelope.

Non-AppError exceptions are logged and collapsed to UNKNOWN_SERVER_ERROR (500)
so internals never reach the client.

A token pair rotated earlier in the same request is written onto every error
response, since the rotation already consumed the old refresh token.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class ErrorCode(str, Enum):
    SUCCESS = "SUCCESS"
    REQUIRED_PARAMETER_MISSING = "REQUIRED_PARAMETER_MISSING"
    UNKNOWN_SERVER_ERROR = "UNKNOWN_SERVER_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"

    EMAIL_ALREADY_VERIFIED = "EMAIL_ALREADY_VERIFIED"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_EMAIL_OR_PASSWORD = "INVALID_EMAIL_OR_PASSWORD"

    INVALID_PASSWORD = "INVALID_PASSWORD"
    INVALID_OTP = "INVALID_OTP"
    INVALID_ROLE = "INVALID_ROLE"
    USER_ALREADY_EXIST = "USER_ALREADY_EXIST"
    USER_NOT_EXIST = "USER_NOT_EXIST"
    USER_SUSPENDED = "USER_SUSPENDED"

    INVALID_DATE = "INVALID_DATE"
    DATE_FIELD_MISSING = "DATE_FIELD_MISSING"
    LIMIT_EXCEED_TRY_IN_24HR = "LIMIT_EXCEED_TRY_IN_24HR"
    LIMIT_EXCEED_TRY_IN_60MIN = "LIMIT_EXCEED_TRY_IN_60MIN"
    LIMIT_EXCEED_TRY_IN_5MIN = "LIMIT_EXCEED_TRY_IN_5MIN"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"

    EVENT_NOT_EXIST = "EVENT_NOT_EXIST"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    INVALID_EVENT_TYPE = "INVALID_EVENT_TYPE"
    INVALID_REGISTRATION_ID = "INVALID_REGISTRATION_ID"
    REGISTRATION_NOT_EXIST = "REGISTRATION_NOT_EXIST"
    NOT_ALLOWED = "NOT_ALLOWED"


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.UNKNOWN_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[ErrorCode] = None,
        data: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.data = data

    def to_dict(self) -> dict:
        payload: dict = {"message": self.message, "errorCode": self.error_code.value}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = ErrorCode.REQUIRED_PARAMETER_MISSING


class AuthError(AppError):
    status_code = 401
    error_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(AppError):
    status_code = 403
    error_code = ErrorCode.NOT_ALLOWED


class NotFoundError(AppError):
    status_code = 404
    error_code = ErrorCode.USER_NOT_EXIST


class ConflictError(AppError):
    status_code = 409
    error_code = ErrorCode.USER_ALREADY_EXIST


class RateLimitError(AppError):
    status_code = 429
    error_code = ErrorCode.LIMIT_EXCEED_TRY_IN_24HR

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[ErrorCode] = None,
        retry_after_seconds: int = 0,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            data={"retryAfterSeconds": retry_after_seconds},
        )
        self.retry_after_seconds = retry_after_seconds


class InternalError(AppError):
    status_code = 500
    error_code = ErrorCode.UNKNOWN_SERVER_ERROR


def _carry_rotated_session(request: Request, response: JSONResponse) -> JSONResponse:
    pair = getattr(request.state, "rotated_pair", None)
    transport = getattr(request.app.state, "transport", None)
    if pair is not None and transport is not None:
        transport.write(response, pair)
    return response


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        headers = None
        if isinstance(exc, RateLimitError) and exc.retry_after_seconds > 0:
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        resp = JSONResponse(
            status_code=exc.status_code, content=exc.to_dict(), headers=headers
        )
        return _carry_rotated_session(request, resp)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = sorted(
            {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
        )
        resp = JSONResponse(
            status_code=400,
            content={
                "message": "required parameters missing or malformed",
                "errorCode": ErrorCode.REQUIRED_PARAMETER_MISSING.value,
                "data": {"fields": fields},
            },
        )
        return _carry_rotated_session(request, resp)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        resp = JSONResponse(
            status_code=500,
            content={
                "message": "server error, please try later",
                "errorCode": ErrorCode.UNKNOWN_SERVER_ERROR.value,
            },
        )
        return _carry_rotated_session(request, resp)
