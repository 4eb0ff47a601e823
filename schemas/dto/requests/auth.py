"""
Request DTOs for authentication endpoints.

SignupRequest                  — POST /signup
EmailRequest                   — POST /send-email-otp, POST /forget-password
EmailOtpRequest                — POST /verify-email-otp, POST /forget-password-verify-otp
LoginRequest                   — POST /login
ForgetPasswordCompleteRequest  — POST /forget-password-complete

Fields are only checked for presence here (an empty string counts as
missing). Pattern checks live in the auth service so each one can report
its own error code.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """Request body for POST /signup."""

    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(alias="userName", min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: str = Field(min_length=1)


class EmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)


class EmailOtpRequest(BaseModel):
    """``otpCode`` is the 6-digit code sent to the user's email address."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)
    otp_code: str = Field(alias="otpCode", min_length=1)


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ForgetPasswordCompleteRequest(BaseModel):
    """Request body for POST /forget-password-complete."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)
    otp_code: str = Field(alias="otpCode", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1)
