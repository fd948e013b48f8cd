# backend/finease/api/transactions.py

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from finease.core.errors import InvalidArgument, describe_validation_error
from finease.core.security import Identity, get_current_identity
from finease.db.deps import get_controller
from finease.schemas.transactions import (
    DeleteResult, InsertResult, Message, TransactionIn, TransactionOut, UpdateResult,
)
from finease.services.transactions import TransactionAccessController

# Identity is declared first on every route: an unauthenticated request is
# rejected before its body is parsed or the store is even looked up.
ERROR_RESPONSES = {
    400: {"model": Message},
    401: {"model": Message},
    404: {"model": Message},
    503: {"model": Message},
}

router = APIRouter(prefix="/my-transaction", tags=["transactions"], responses=ERROR_RESPONSES)

async def transaction_body(request: Request) -> Optional[TransactionIn]:
    # Read by hand instead of Body(): FastAPI decodes declared bodies before any
    # dependency runs, which would let a malformed body answer ahead of the gate.
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return TransactionIn.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidArgument(describe_validation_error(exc.errors())) from exc

# -----------------------------
# LIST (accept /my-transaction and /my-transaction/)
# -----------------------------
@router.get("", response_model=list[TransactionOut], responses={403: {"model": Message}})
@router.get("/", response_model=list[TransactionOut], include_in_schema=False)
async def list_transactions(
    email: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    controller: TransactionAccessController = Depends(get_controller),
):
    return await controller.list_by_owner(email, identity)

# -----------------------------
# CREATE (accept /my-transaction and /my-transaction/)
# -----------------------------
@router.post("", response_model=InsertResult)
@router.post("/", response_model=InsertResult, include_in_schema=False)
async def create_transaction(
    identity: Identity = Depends(get_current_identity),
    payload: Optional[TransactionIn] = Depends(transaction_body),
    controller: TransactionAccessController = Depends(get_controller),
):
    return await controller.create(payload, identity)

# -----------------------------
# GET ONE
# -----------------------------
@router.get("/{transaction_id}", response_model=TransactionOut)
async def get_transaction(
    transaction_id: str,
    identity: Identity = Depends(get_current_identity),
    controller: TransactionAccessController = Depends(get_controller),
):
    return await controller.get(transaction_id, identity)

# -----------------------------
# UPDATE (partial merge)
# -----------------------------
@router.put("/{transaction_id}", response_model=UpdateResult)
async def update_transaction(
    transaction_id: str,
    identity: Identity = Depends(get_current_identity),
    patch: Optional[TransactionIn] = Depends(transaction_body),
    controller: TransactionAccessController = Depends(get_controller),
):
    return await controller.update(transaction_id, patch, identity)

# -----------------------------
# DELETE
# -----------------------------
@router.delete("/{transaction_id}", response_model=DeleteResult)
async def delete_transaction(
    transaction_id: str,
    identity: Identity = Depends(get_current_identity),
    controller: TransactionAccessController = Depends(get_controller),
):
    return await controller.delete(transaction_id, identity)
