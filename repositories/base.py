"""
Repository base class.

Repositories are the only code that talks to MongoDB. Each one wraps a single
collection of the async pymongo database stored on ``app.state.db`` and maps
raw documents to the pydantic models in ``schemas.models``.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from schemas.models.base import MongoBaseModel

DocT = TypeVar("DocT", bound=MongoBaseModel)


class BaseRepository(Generic[DocT]):
    collection_name: str = ""
    model: type[DocT]

    def __init__(self, db: AsyncDatabase) -> None:
        self._col: AsyncCollection = db[self.collection_name]

    def _to_model(self, raw: Optional[dict]) -> Optional[DocT]:
        if raw is None:
            return None
        return self.model.model_validate(raw)

    async def get_by_id(self, doc_id: Any) -> Optional[DocT]:
        return self._to_model(await self._col.find_one({"_id": doc_id}))

    async def insert(self, doc: DocT) -> DocT:
        result = await self._col.insert_one(doc.to_mongo())
        return doc.model_copy(update={"id": result.inserted_id})

    async def _set_flag_once(self, doc_id: Any, flag: str, extra: dict) -> bool:
        """Flip a boolean flag from False to True exactly once.

        The filter includes ``flag: False`` so concurrent callers race on a
        single document update; only the winner sees ``modified_count == 1``.
        """
        result = await self._col.update_one(
            {"_id": doc_id, flag: False},
            {"$set": {flag: True, **extra}},
        )
        return result.modified_count == 1
