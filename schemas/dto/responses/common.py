"""
Common response DTOs shared across endpoints.

ApiResponse    — the {message, errorCode, data?} envelope every endpoint returns
HealthResponse — GET /health
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from errors import ErrorCode


class ApiResponse(BaseModel):
    """Standard envelope. Clients branch on ``errorCode``, never ``message``."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    error_code: str = Field(default=ErrorCode.SUCCESS.value, alias="errorCode")
    data: Optional[Any] = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    checks: dict[str, str]


def ok(message: str, data: Optional[Any] = None) -> ApiResponse:
    return ApiResponse(message=message, data=data)
