from fastapi import Request

from finease.core.errors import ServiceUnavailable
from finease.db.store import TransactionStore
from finease.services.transactions import TransactionAccessController

# FastAPI dependencies handing out the collaborators built once at startup (see main.lifespan).

def get_store(request: Request) -> TransactionStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise ServiceUnavailable("Database not available")
    return store

def get_controller(request: Request) -> TransactionAccessController:
    return TransactionAccessController(get_store(request))
