"""
Refresh token document model.

Maps to the `refresh-tokens` MongoDB collection.

One document per issued refresh token (login and every rotation).
refresh_token_hash stores argon2(refresh_token) — the token is never stored.
is_consumed flips to True once, when the token is exchanged for a new pair.
Documents are kept as an audit trail and never deleted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel, PyObjectId


class RefreshTokenDoc(MongoBaseModel):
    """Document model for the `refresh-tokens` collection."""

    user_id: PyObjectId
    refresh_token_hash: str
    is_consumed: bool = False
    created_on: datetime
    consumed_on: Optional[datetime] = None
