"""
MongoDB integration for the record store.

This module owns the single process‑wide ``MongoClient``.  The client
is created lazily by ``get_client`` from ``settings`` and returns
timezone-aware (UTC) datetimes; the startup hook
``init_db`` verifies the server is reachable and ensures the indexes
the service relies on, and the shutdown hook ``close_db`` releases the
connection pool.

Tests replace the client with an in‑memory one via ``set_client``.
"""

import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .config import settings

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    """Return the shared client, connecting on first use."""
    global _client
    if _client is None:
        _client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
            tz_aware=True,
        )
    return _client


def set_client(client: Optional[MongoClient]) -> None:
    """Install ``client`` as the shared client (``None`` forgets it)."""
    global _client
    _client = client


def get_database() -> Database:
    return get_client()[settings.database_name]


def get_users_collection() -> Collection:
    return get_database()[USERS_COLLECTION]


def ensure_indexes() -> None:
    """Create the indexes used by the users collection.

    Email uniqueness is enforced here by the store rather than by the
    service layer.  ``createdAt`` backs the default list ordering.
    """
    users = get_users_collection()
    users.create_index([("email", ASCENDING)], unique=True, name="email_unique")
    users.create_index([("createdAt", DESCENDING)], name="created_at_desc")


def init_db() -> None:
    """Check connectivity and prepare the collection.

    Raises the underlying ``PyMongoError`` when the server cannot be
    reached so that the ASGI server aborts startup instead of serving
    requests that would all fail.
    """
    try:
        get_client().admin.command("ping")
    except PyMongoError as exc:
        logger.error("Database connection error: %s", exc)
        raise
    ensure_indexes()
    logger.info("MongoDB connected: database %s", settings.database_name)


def close_db() -> None:
    """Close the shared client, if any."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")
