# backend/finease/services/transactions.py

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from finease.core.errors import Forbidden, Internal, InvalidArgument, NotFound, ServiceUnavailable
from finease.core.security import Identity
from finease.db.store import StorageError, StorageUnavailable, TransactionStore
from finease.schemas.transactions import (
    DeleteResult, InsertResult, TransactionIn, UpdateResult,
)

logger = logging.getLogger(__name__)

# Never writable through an update body
PROTECTED_FIELDS = ("_id", "id", "email", "createdAt")

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class TransactionAccessController:
    """
    Ownership rules for transaction records.

    A record belongs to the email stamped on it at creation. Reads, updates and
    deletes by id are filtered on both the id and the caller's email, so a
    record owned by someone else looks exactly like a missing one (404).
    """

    def __init__(self, store: TransactionStore):
        self.store = store

    async def list_by_owner(self, owner_email: Optional[str], caller: Identity) -> list[dict[str, Any]]:
        if not owner_email:
            raise InvalidArgument("Email query parameter required")
        if owner_email != caller.email:
            logger.warning("List denied: %s asked for %s", caller.email, owner_email)
            raise Forbidden("Forbidden: Email mismatch")

        async with _storage("Failed to fetch transactions", owner=owner_email):
            return await self.store.find({"email": owner_email}, sort=("date", -1))

    async def get(self, raw_id: str, caller: Identity) -> dict[str, Any]:
        oid = self._parse_id(raw_id)
        async with _storage("Failed to fetch transaction", id=raw_id):
            doc = await self.store.find_one({"_id": oid, "email": caller.email})
        if doc is None:
            raise NotFound("Transaction not found")
        return doc

    async def create(self, payload: Optional[TransactionIn], caller: Identity) -> InsertResult:
        data = payload.sent_fields() if payload is not None else {}
        if not data:
            raise InvalidArgument("Transaction data required")

        # server-owned fields win over whatever the client sent
        data["email"] = caller.email
        data["createdAt"] = utcnow()

        async with _storage("Failed to create transaction", owner=caller.email):
            res = await self.store.insert_one(data)
        logger.info("Created transaction %s for %s", res.inserted_id, caller.email)
        return InsertResult(acknowledged=res.acknowledged, inserted_id=str(res.inserted_id))

    async def update(self, raw_id: str, patch: Optional[TransactionIn], caller: Identity) -> UpdateResult:
        oid = self._parse_id(raw_id)
        fields = patch.sent_fields() if patch is not None else {}
        for key in PROTECTED_FIELDS:
            fields.pop(key, None)
        fields["updatedAt"] = utcnow()

        async with _storage("Failed to update transaction", id=raw_id):
            res = await self.store.update_one({"_id": oid, "email": caller.email}, fields)
        if res.matched_count == 0:
            raise NotFound("Transaction not found")
        return UpdateResult(
            acknowledged=res.acknowledged,
            matched_count=res.matched_count,
            modified_count=res.modified_count,
            upserted_count=0 if res.upserted_id is None else 1,
            upserted_id=None if res.upserted_id is None else str(res.upserted_id),
        )

    async def delete(self, raw_id: str, caller: Identity) -> DeleteResult:
        oid = self._parse_id(raw_id)
        async with _storage("Failed to delete transaction", id=raw_id):
            deleted = await self.store.delete_one({"_id": oid, "email": caller.email})
        if deleted == 0:
            raise NotFound("Transaction not found")
        logger.info("Deleted transaction %s for %s", raw_id, caller.email)
        return DeleteResult(deleted_count=deleted)

    def _parse_id(self, raw_id: str) -> Any:
        # checked before any storage call; a bad id must never reach the driver
        oid = self.store.parse_id(raw_id)
        if oid is None:
            raise InvalidArgument("Invalid transaction ID")
        return oid

@asynccontextmanager
async def _storage(message: str, **context: Any):
    # maps store failures onto API errors for one block of storage calls
    try:
        yield
    except StorageUnavailable as exc:
        logger.error("%s, database unreachable %s: %s", message, context, exc)
        raise ServiceUnavailable("Database not available") from exc
    except StorageError as exc:
        logger.error("%s %s: %s", message, context, exc, exc_info=exc)
        raise Internal(message) from exc
