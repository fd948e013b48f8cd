"""
Storage collaborator contract.

The controller only ever talks to a TransactionStore: it asks the store to
parse an identifier, then passes equality filters and plain dicts around.
Which database (or none) sits behind it is decided at startup.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol

Filter = dict[str, Any]
Record = dict[str, Any]

class StorageError(Exception):
    """The store failed while handling an operation."""

class StorageUnavailable(StorageError):
    """The store could not be reached at all."""

@dataclass
class InsertOutcome:
    acknowledged: bool
    inserted_id: Any

@dataclass
class UpdateOutcome:
    acknowledged: bool
    matched_count: int
    modified_count: int
    upserted_id: Any = None

class TransactionStore(Protocol):
    def parse_id(self, raw: str) -> Optional[Any]:
        """Return the store's native id for `raw`, or None when it is not one."""
        ...

    async def find(self, filter: Filter, sort: Optional[tuple[str, int]] = None) -> list[Record]: ...

    async def find_one(self, filter: Filter) -> Optional[Record]: ...

    async def insert_one(self, doc: Record) -> InsertOutcome: ...

    async def update_one(self, filter: Filter, fields: Record) -> UpdateOutcome:
        """Merge `fields` into the first matching document ($set semantics)."""
        ...

    async def delete_one(self, filter: Filter) -> int:
        """Delete the first matching document; returns how many were deleted."""
        ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...
