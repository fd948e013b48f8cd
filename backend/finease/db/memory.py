import copy
from typing import Optional

from bson import ObjectId

from finease.db.store import Filter, InsertOutcome, Record, UpdateOutcome

class InMemoryTransactionStore:
    """Dict-backed TransactionStore for local runs and tests.

    Mirrors the Mongo behaviour the controller relies on: ObjectId ids,
    equality filters, $set-style partial updates, and a stable sort where
    documents missing the sort key come last on a descending sort.
    """

    def __init__(self):
        # insertion order is the natural order
        self._docs: dict[ObjectId, Record] = {}

    def parse_id(self, raw: str) -> Optional[ObjectId]:
        if not isinstance(raw, str) or not ObjectId.is_valid(raw):
            return None
        return ObjectId(raw)

    async def find(self, filter: Filter, sort: Optional[tuple[str, int]] = None) -> list[Record]:
        docs = [copy.deepcopy(d) for d in self._docs.values() if _matches(d, filter)]
        if sort is not None:
            key, direction = sort
            docs.sort(key=lambda d: _sort_key(d.get(key)), reverse=direction < 0)
        return docs

    async def find_one(self, filter: Filter) -> Optional[Record]:
        for doc in self._docs.values():
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, doc: Record) -> InsertOutcome:
        stored = copy.deepcopy(doc)
        stored["_id"] = stored.get("_id") or ObjectId()
        self._docs[stored["_id"]] = stored
        return InsertOutcome(acknowledged=True, inserted_id=stored["_id"])

    async def update_one(self, filter: Filter, fields: Record) -> UpdateOutcome:
        for doc in self._docs.values():
            if _matches(doc, filter):
                changed = any(doc.get(k, _MISSING) != v for k, v in fields.items())
                doc.update(copy.deepcopy(fields))
                return UpdateOutcome(acknowledged=True, matched_count=1, modified_count=int(changed))
        return UpdateOutcome(acknowledged=True, matched_count=0, modified_count=0)

    async def delete_one(self, filter: Filter) -> int:
        for oid, doc in self._docs.items():
            if _matches(doc, filter):
                del self._docs[oid]
                return 1
        return 0

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self._docs.clear()

    def __len__(self) -> int:
        return len(self._docs)

_MISSING = object()

def _sort_key(value: object) -> tuple:
    # BSON comparison order for the types a client can send:
    # missing/null < numbers < strings < anything else
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, repr(value))

def _matches(doc: Record, filter: Filter) -> bool:
    return all(doc.get(k, _MISSING) == v for k, v in filter.items())
