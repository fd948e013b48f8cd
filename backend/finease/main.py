import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finease.api import health, transactions
from finease.core.config import Settings, settings as default_settings
from finease.core.errors import install_error_handlers
from finease.core.logging import configure_logging
from finease.core.security import FirebaseVerifier, IdentityVerifier
from finease.db.memory import InMemoryTransactionStore
from finease.db.mongo import MongoTransactionStore
from finease.db.store import StorageError, TransactionStore

logger = logging.getLogger(__name__)

async def open_store(cfg: Settings) -> Optional[TransactionStore]:
    """Build the store named by STORAGE_BACKEND; None when it cannot be configured."""
    if cfg.STORAGE_BACKEND == "memory":
        logger.warning("Using in-memory storage; data is lost on restart")
        return InMemoryTransactionStore()

    uri = cfg.mongo_uri
    if uri is None:
        logger.error("MongoDB is not configured: set MONGODB_URI or DB_USERNAME/DB_PASSWORD/DB_CLUSTER")
        return None

    store = MongoTransactionStore.from_uri(uri, cfg.DB_NAME, cfg.DB_COLLECTION)
    try:
        await store.ping()
    except StorageError as exc:
        # keep the store: the driver reconnects once the cluster is reachable
        logger.error("MongoDB ping failed at startup: %s", exc)
    return store

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Collaborators injected through create_app are left alone (tests do this).
    cfg: Settings = app.state.settings
    if app.state.verifier is None:
        app.state.verifier = FirebaseVerifier.from_service_account(cfg.FIREBASE_SERVICE_ACCOUNT)

    owned_store = None
    if app.state.store is None:
        owned_store = app.state.store = await open_store(cfg)

    yield

    if owned_store is not None:
        await owned_store.close()
        app.state.store = None

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TransactionStore] = None,
    verifier: Optional[IdentityVerifier] = None,
) -> FastAPI:
    cfg = settings or default_settings
    configure_logging(cfg.LOG_LEVEL)

    app = FastAPI(title=cfg.APP_NAME, lifespan=lifespan)
    app.state.settings = cfg
    app.state.store = store
    app.state.verifier = verifier

    # --- CORS configuration ---
    # Browser frontends call this API directly; origins come from CORS_ORIGINS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # --- end CORS configuration ---

    install_error_handlers(app)

    # Wire in the routers so their routes become part of the app.
    app.include_router(health.router)
    app.include_router(transactions.router)
    return app

# This is what Uvicorn runs: `uvicorn finease.main:app`
app = create_app()
