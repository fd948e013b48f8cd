import logging
from typing import Optional

from bson import ObjectId
from pymongo import AsyncMongoClient
from pymongo.errors import ConnectionFailure, PyMongoError
from pymongo.server_api import ServerApi

from finease.db.store import (
    Filter, InsertOutcome, Record, StorageError, StorageUnavailable, UpdateOutcome,
)

logger = logging.getLogger(__name__)

class MongoTransactionStore:
    """TransactionStore backed by one MongoDB collection.

    Build it once per process and share it: the client keeps its own
    connection pool and reconnects on its own when a connection drops.
    """

    def __init__(self, client: AsyncMongoClient, db_name: str, collection_name: str):
        self._client = client
        self._collection = client[db_name][collection_name]

    @classmethod
    def from_uri(cls, uri: str, db_name: str, collection_name: str) -> "MongoTransactionStore":
        # Stable API v1, strict, same as the Atlas driver defaults we deploy with
        client = AsyncMongoClient(
            uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            tz_aware=True,
        )
        return cls(client, db_name, collection_name)

    def parse_id(self, raw: str) -> Optional[ObjectId]:
        if not isinstance(raw, str) or not ObjectId.is_valid(raw):
            return None
        return ObjectId(raw)

    async def find(self, filter: Filter, sort: Optional[tuple[str, int]] = None) -> list[Record]:
        try:
            cursor = self._collection.find(filter)
            if sort is not None:
                cursor = cursor.sort(*sort)
            return await cursor.to_list()
        except PyMongoError as exc:
            raise _translate(exc) from exc

    async def find_one(self, filter: Filter) -> Optional[Record]:
        try:
            return await self._collection.find_one(filter)
        except PyMongoError as exc:
            raise _translate(exc) from exc

    async def insert_one(self, doc: Record) -> InsertOutcome:
        try:
            res = await self._collection.insert_one(doc)
        except PyMongoError as exc:
            raise _translate(exc) from exc
        return InsertOutcome(acknowledged=res.acknowledged, inserted_id=res.inserted_id)

    async def update_one(self, filter: Filter, fields: Record) -> UpdateOutcome:
        try:
            res = await self._collection.update_one(filter, {"$set": fields})
        except PyMongoError as exc:
            raise _translate(exc) from exc
        return UpdateOutcome(
            acknowledged=res.acknowledged,
            matched_count=res.matched_count,
            modified_count=res.modified_count,
            upserted_id=res.upserted_id,
        )

    async def delete_one(self, filter: Filter) -> int:
        try:
            res = await self._collection.delete_one(filter)
        except PyMongoError as exc:
            raise _translate(exc) from exc
        return res.deleted_count

    async def ping(self) -> None:
        try:
            await self._client.admin.command("ping")
        except PyMongoError as exc:
            raise _translate(exc) from exc
        logger.info("MongoDB connected (collection=%s)", self._collection.full_name)

    async def close(self) -> None:
        await self._client.close()

def _translate(exc: PyMongoError) -> StorageError:
    # ServerSelectionTimeoutError and AutoReconnect both subclass ConnectionFailure
    if isinstance(exc, ConnectionFailure):
        return StorageUnavailable(str(exc))
    return StorageError(str(exc))
