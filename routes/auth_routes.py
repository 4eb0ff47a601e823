"""
Unauthenticated account endpoints.

POST /signup                      create account, mail verification code
POST /send-email-otp              resend verification code (throttled)
POST /verify-email-otp            mark email verified
POST /login                       issue session tokens
POST /logout                      clear session tokens
POST /forget-password             mail password reset code
POST /forget-password-verify-otp  check reset code without using it
POST /forget-password-complete    use reset code and set new password
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from dependencies import get_auth_service, get_transport
from infrastructure.session_transport import TokenTransport
from schemas.dto.requests.auth import (
    EmailOtpRequest,
    EmailRequest,
    ForgetPasswordCompleteRequest,
    LoginRequest,
    SignupRequest,
)
from schemas.dto.responses.common import ApiResponse, ok
from services.auth_service import AuthService

router = APIRouter(tags=["auth"])

_envelope = {"response_model": ApiResponse, "response_model_exclude_none": True}


@router.post("/signup", **_envelope)
async def signup(
    body: SignupRequest, auth: AuthService = Depends(get_auth_service)
) -> ApiResponse:
    await auth.signup(body.user_name, body.email, body.password, body.role)
    return ok("signup successful, verify otp")


@router.post("/send-email-otp", **_envelope)
async def send_email_otp(
    body: EmailRequest, auth: AuthService = Depends(get_auth_service)
) -> ApiResponse:
    await auth.send_email_otp(body.email)
    return ok("email otp sent successfully")


@router.post("/verify-email-otp", **_envelope)
async def verify_email_otp(
    body: EmailOtpRequest, auth: AuthService = Depends(get_auth_service)
) -> ApiResponse:
    await auth.verify_email_otp(body.email, body.otp_code)
    return ok("email verified successfully")


@router.post("/login", **_envelope)
async def login(
    body: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    transport: TokenTransport = Depends(get_transport),
) -> ApiResponse:
    user, pair = await auth.login(body.email, body.password)
    transport.write(response, pair)
    return ok("login successful", data=user.to_profile())


@router.post("/logout", **_envelope)
async def logout(
    response: Response, transport: TokenTransport = Depends(get_transport)
) -> ApiResponse:
    transport.clear(response)
    return ok("logout successful")


@router.post("/forget-password", **_envelope)
async def forget_password(
    body: EmailRequest, auth: AuthService = Depends(get_auth_service)
) -> ApiResponse:
    await auth.forget_password(body.email)
    return ok("otp sent on email successfully")


@router.post("/forget-password-verify-otp", **_envelope)
async def forget_password_verify_otp(
    body: EmailOtpRequest, auth: AuthService = Depends(get_auth_service)
) -> ApiResponse:
    await auth.forget_password_verify_otp(body.email, body.otp_code)
    return ok("otp is valid, do not use this message for condition checking, use errorCode instead")


@router.post("/forget-password-complete", **_envelope)
async def forget_password_complete(
    body: ForgetPasswordCompleteRequest, auth: AuthService = Depends(get_auth_service)
) -> ApiResponse:
    await auth.forget_password_complete(body.email, body.otp_code, body.new_password)
    return ok("your password has been updated, proceed to login")
