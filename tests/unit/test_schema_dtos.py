"""Unit tests for request and response DTOs."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from schemas.dto.requests.auth import (
    EmailOtpRequest,
    EmailRequest,
    ForgetPasswordCompleteRequest,
    LoginRequest,
    SignupRequest,
)
from schemas.dto.requests.event import CreateEventRequest, UpdateEventRequest
from schemas.dto.responses.common import ApiResponse, HealthResponse, ok


# ── Auth requests ─────────────────────────────────────────────────────────────


class TestSignupRequest:
    def test_camelcase_alias(self):
        req = SignupRequest.model_validate(
            {"userName": "Alice", "email": "a@b.co", "password": "Secret1", "role": "user"}
        )
        assert req.user_name == "Alice"

    def test_field_name_also_accepted(self):
        req = SignupRequest(user_name="Alice", email="a@b.co", password="Secret1", role="user")
        assert req.role == "user"

    @pytest.mark.parametrize("missing", ["userName", "email", "password", "role"])
    def test_each_field_required(self, missing):
        payload = {"userName": "Alice", "email": "a@b.co", "password": "Secret1", "role": "user"}
        payload.pop(missing)
        with pytest.raises(ValidationError):
            SignupRequest.model_validate(payload)

    def test_empty_string_counts_as_missing(self):
        with pytest.raises(ValidationError):
            SignupRequest.model_validate(
                {"userName": "", "email": "a@b.co", "password": "Secret1", "role": "user"}
            )


class TestLoginRequest:
    def test_valid(self):
        req = LoginRequest.model_validate({"email": "a@b.co", "password": "x"})
        assert req.email == "a@b.co"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"email": "a@b.co"}, {"password": "x"}, {"email": "", "password": "x"}],
    )
    def test_missing_required_fields_rejected(self, payload):
        with pytest.raises(ValidationError):
            LoginRequest.model_validate(payload)


class TestOtpRequests:
    def test_email_request(self):
        assert EmailRequest(email="a@b.co").email == "a@b.co"

    def test_otp_alias(self):
        req = EmailOtpRequest.model_validate({"email": "a@b.co", "otpCode": "123456"})
        assert req.otp_code == "123456"

    def test_otp_format_not_checked_here(self):
        req = EmailOtpRequest.model_validate({"email": "a@b.co", "otpCode": "12ab"})
        assert req.otp_code == "12ab"

    def test_forget_password_complete_aliases(self):
        req = ForgetPasswordCompleteRequest.model_validate(
            {"email": "a@b.co", "otpCode": "123456", "newPassword": "Secret1"}
        )
        assert (req.otp_code, req.new_password) == ("123456", "Secret1")

    def test_forget_password_complete_requires_new_password(self):
        with pytest.raises(ValidationError):
            ForgetPasswordCompleteRequest.model_validate({"email": "a@b.co", "otpCode": "123456"})


# ── Event requests ────────────────────────────────────────────────────────────


class TestCreateEventRequest:
    def _payload(self, **overrides):
        payload = {
            "title": "Meetup",
            "description": "Talks",
            "date": "2026-06-01",
            "startTime": "18:00",
            "endTime": "20:00",
            "eventType": "online",
            "price": "0",
        }
        payload.update(overrides)
        return payload

    def test_location_optional(self):
        req = CreateEventRequest.model_validate(self._payload())
        assert req.location is None
        assert req.event_type == "online"
        assert (req.start_time, req.end_time) == ("18:00", "20:00")

    @pytest.mark.parametrize("field", ["title", "date", "startTime", "eventType", "price"])
    def test_required_fields(self, field):
        payload = self._payload()
        payload.pop(field)
        with pytest.raises(ValidationError):
            CreateEventRequest.model_validate(payload)


class TestUpdateEventRequest:
    def test_all_fields_optional(self):
        req = UpdateEventRequest.model_validate({})
        assert req.model_dump(exclude_none=True) == {}

    def test_aliases(self):
        req = UpdateEventRequest.model_validate({"eventType": "onsite", "endTime": "21:00"})
        assert req.event_type == "onsite"
        assert req.end_time == "21:00"


# ── Responses ─────────────────────────────────────────────────────────────────


class TestApiResponse:
    def test_ok_defaults_to_success(self):
        resp = ok("login success")
        assert resp.model_dump(by_alias=True, exclude_none=True) == {
            "message": "login success",
            "errorCode": "SUCCESS",
        }

    def test_data_included_when_present(self):
        body = ok("events", data=[{"id": "1"}]).model_dump(by_alias=True)
        assert body["data"] == [{"id": "1"}]

    def test_error_code_by_name(self):
        assert ApiResponse(message="m", error_code="X").error_code == "X"


class TestHealthResponse:
    def test_shape(self):
        resp = HealthResponse(status="healthy", checks={"mongodb": "ok"})
        assert resp.model_dump() == {"status": "healthy", "checks": {"mongodb": "ok"}}
