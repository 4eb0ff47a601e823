"""
Transient session models (never persisted as documents).

Principal — the authenticated identity attached to a request
TokenPair — an access/refresh token pair handed to the transport layer
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Principal(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    role: str
    is_admin: bool = False
    user_name: str = ""
    email: str = ""


class TokenPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
