"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields and are
suitable for local development against a MongoDB server on
``localhost``.  In a production deployment you should override these
via environment variables (``APP_ENV=production``, ``MONGODB_URI`` and
so on).
"""

import os
from dataclasses import dataclass, field
from typing import List


def _environment() -> str:
    return os.getenv("APP_ENV", "development").lower()


def _default_database_name() -> str:
    if _environment() == "test":
        return "crud_database_test"
    return "crud_database"


def _default_port() -> str:
    return "5001" if _environment() == "test" else "5000"


def _cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS")
    if raw is None:
        # Browsers may call the API from anywhere outside production.
        return [] if _environment() == "production" else ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "User Records API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    environment: str = _environment()
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Connection string and database name for the MongoDB record store.
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    database_name: str = os.getenv("MONGODB_DATABASE", _default_database_name())
    server_selection_timeout_ms: int = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", _default_port()))
    cors_origins: List[str] = field(default_factory=_cors_origins)

    # Pagination for ``GET /api/users``.  Requests asking for more than
    # ``max_page_limit`` records are clamped to it.
    default_page_limit: int = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
    max_page_limit: int = int(os.getenv("MAX_PAGE_LIMIT", "100"))
    # Highest page number honoured; larger requests are clamped so the
    # computed skip stays well inside a 64-bit integer.
    max_page: int = int(os.getenv("MAX_PAGE", "1000000"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at import time, environment variables should be set
# before importing this module.
settings = Settings()
