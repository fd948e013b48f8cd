from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Storage assigns ids; a caller can never choose one
_ID_KEYS = ("_id", "id")

class TransactionIn(BaseModel):
    # Known fields are listed, not coerced: values are stored exactly as the
    # client sent them (an amount of "50" stays a string). Anything else the
    # client sends is kept as an extra.
    model_config = ConfigDict(extra="allow")

    type: Any = None            # e.g. "income" / "expense"
    category: Any = None
    amount: Any = None
    description: Any = None
    date: Any = None            # ISO string or epoch number, used for ordering

    @model_validator(mode="before")
    @classmethod
    def drop_ids(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k not in _ID_KEYS}
        return data

    def sent_fields(self) -> dict[str, Any]:
        """Only what the client actually sent, extras included."""
        return self.model_dump(exclude_unset=True)

class TransactionOut(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # createdAt / updatedAt and every client field ride along as extras
    id: str = Field(alias="_id")
    email: str

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, ObjectId) else v

class _CamelOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class InsertResult(_CamelOut):
    acknowledged: bool
    inserted_id: str

class UpdateResult(_CamelOut):
    acknowledged: bool
    matched_count: int
    modified_count: int
    upserted_count: int = 0
    upserted_id: Optional[str] = None

class DeleteResult(_CamelOut):
    deleted_count: int

class Message(BaseModel):
    message: str
