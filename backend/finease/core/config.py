import os
from typing import Optional
from urllib.parse import quote_plus

from pydantic import BaseModel

# Centralized application settings.
# Values come from the environment; nothing is read from disk here.

class Settings(BaseModel):
    APP_NAME: str = os.getenv("APP_NAME", "FinEase Server")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Comma-separated list, "*" allows any origin
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # "mongo" for the real database, "memory" for local runs without one
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "mongo")

    # Either a full URI, or the Atlas parts below
    MONGODB_URI: Optional[str] = os.getenv("MONGODB_URI")
    DB_USERNAME: Optional[str] = os.getenv("DB_USERNAME")
    DB_PASSWORD: Optional[str] = os.getenv("DB_PASSWORD")
    # like cluster0.abcde.mongodb.net
    DB_CLUSTER: Optional[str] = os.getenv("DB_CLUSTER")

    DB_NAME: str = os.getenv("DB_NAME", "financeDB")
    DB_COLLECTION: str = os.getenv("DB_COLLECTION", "main-data")

    # Base64 of the Firebase service-account JSON
    FIREBASE_SERVICE_ACCOUNT: Optional[str] = os.getenv("FIREBASE_SERVICE_ACCOUNT")

    @property
    def mongo_uri(self) -> Optional[str]:
        if self.MONGODB_URI:
            return self.MONGODB_URI
        if not (self.DB_USERNAME and self.DB_PASSWORD and self.DB_CLUSTER):
            return None
        return (
            f"mongodb+srv://{quote_plus(self.DB_USERNAME)}:{quote_plus(self.DB_PASSWORD)}"
            f"@{self.DB_CLUSTER}/?retryWrites=true&w=majority"
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

# Singleton-style settings object imported elsewhere (avoid re-parsing env repeatedly)
settings = Settings()
