"""Index bootstrap, run once from the app lifespan."""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase

from shared.logging import get_logger

log = get_logger(__name__)


async def ensure_indexes(db: AsyncDatabase) -> None:
    await db["users"].create_index([("email", ASCENDING)], unique=True)
    await db["otps"].create_index([("email", ASCENDING), ("created_on", DESCENDING)])
    await db["forget-password-otps"].create_index(
        [("email", ASCENDING), ("created_on", DESCENDING)]
    )
    await db["refresh-tokens"].create_index(
        [("user_id", ASCENDING), ("is_consumed", ASCENDING), ("created_on", DESCENDING)]
    )
    await db["events"].create_index([("organizer", ASCENDING)])
    await db["registrations"].create_index(
        [("participant", ASCENDING), ("event", ASCENDING)]
    )
    log.info("mongo_indexes_ensured", db=db.name)
