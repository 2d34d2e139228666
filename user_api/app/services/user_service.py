"""
Business logic for users.

``UserService`` wraps the ``users`` collection of the record store.
pymongo is a blocking driver, so each store call is handed to the
thread pool with ``run_in_threadpool`` and awaited; the event loop keeps
serving other requests meanwhile.

Writes to an existing record use single‑document atomic updates
(``$set``) rather than read‑modify‑write, so concurrent updates to
different fields of the same user do not overwrite each other.

Identifiers are MongoDB ObjectIds in their 24‑character hex form.  A
malformed identifier raises ``bson.errors.InvalidId``, which is left to
the application's error handlers.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi.concurrency import run_in_threadpool
from pymongo import DESCENDING, ReturnDocument

from ..core.db import get_users_collection
from ..core.security import hash_password
from ..schemas.user import UserCreate, UserRead, UserUpdate

logger = logging.getLogger(__name__)

# Projection applied to every read: the password hash never leaves the store.
PUBLIC_FIELDS = {"password": 0}
NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


@dataclass
class UserPage:
    """One page of a filtered user listing."""

    users: List[UserRead]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def build_filter(
    is_active: Optional[bool] = None,
    role: Optional[str] = None,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    """Combine the supplied list filters into one MongoDB query.

    ``search`` matches a case‑insensitive substring of ``name`` or
    ``email``; it is matched literally, not as a regular expression.
    """
    query: Dict[str, Any] = {}
    if is_active is not None:
        query["isActive"] = is_active
    if role:
        query["role"] = role
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]
    return query


class UserService:
    """Create, read, update, deactivate and delete user records."""

    @classmethod
    async def list_users(
        cls,
        page: int = 1,
        limit: int = 10,
        is_active: Optional[bool] = None,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> UserPage:
        """Return one page of users, newest first.

        ``total`` counts every record matching the filters, independent
        of the page window.
        """
        users = get_users_collection()
        query = build_filter(is_active=is_active, role=role, search=search)
        skip = (page - 1) * limit

        def fetch_page() -> List[Dict[str, Any]]:
            cursor = users.find(query, PUBLIC_FIELDS).sort(NEWEST_FIRST).skip(skip).limit(limit)
            return list(cursor)

        documents = await run_in_threadpool(fetch_page)
        total = await run_in_threadpool(users.count_documents, query)
        return UserPage(
            users=[UserRead.from_document(doc) for doc in documents],
            total=total,
            page=page,
            limit=limit,
        )

    @classmethod
    async def get_user(cls, user_id: str) -> Optional[UserRead]:
        """Retrieve a user by ID, or ``None`` when there is no such user."""
        users = get_users_collection()
        document = await run_in_threadpool(users.find_one, {"_id": ObjectId(user_id)}, PUBLIC_FIELDS)
        if document is None:
            return None
        return UserRead.from_document(document)

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserRead:
        """Insert a new, active user.

        The store assigns the ID; ``createdAt`` and ``updatedAt`` are
        set to the current time.  A duplicate email surfaces as
        ``pymongo.errors.DuplicateKeyError`` from the unique index.
        """
        logger.info("Creating user %s", data.email)
        now = _now()
        document: Dict[str, Any] = {
            "name": data.name,
            "email": data.email,
            "password": hash_password(data.password),
            "role": data.role,
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
        }
        if data.age is not None:
            document["age"] = data.age
        users = get_users_collection()
        result = await run_in_threadpool(users.insert_one, document)
        # Read back so the response carries what the store actually kept.
        created = await run_in_threadpool(users.find_one, {"_id": result.inserted_id}, PUBLIC_FIELDS)
        return UserRead.from_document(created)

    @classmethod
    async def update_user(cls, user_id: str, data: UserUpdate) -> Optional[UserRead]:
        """Overwrite only the fields present in ``data``.

        Omitted fields keep their stored values.  Returns the updated
        user, or ``None`` if no user has this ID.
        """
        object_id = ObjectId(user_id)
        changes = data.changes()
        if not changes:
            return await cls.get_user(user_id)
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])
        changes["updatedAt"] = _now()

        users = get_users_collection()
        document = await run_in_threadpool(
            users.find_one_and_update,
            {"_id": object_id},
            {"$set": changes},
            projection=PUBLIC_FIELDS,
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            return None
        logger.info("Updated user %s: %s", user_id, sorted(key for key in changes if key != "updatedAt"))
        return UserRead.from_document(document)

    @classmethod
    async def deactivate_user(cls, user_id: str) -> bool:
        """Soft delete: mark the user inactive.  ``False`` if not found."""
        users = get_users_collection()
        result = await run_in_threadpool(
            users.update_one,
            {"_id": ObjectId(user_id)},
            {"$set": {"isActive": False, "updatedAt": _now()}},
        )
        if result.matched_count:
            logger.info("Deactivated user %s", user_id)
        return result.matched_count > 0

    @classmethod
    async def activate_user(cls, user_id: str) -> Optional[UserRead]:
        """Mark the user active again and return it.  Idempotent."""
        users = get_users_collection()
        document = await run_in_threadpool(
            users.find_one_and_update,
            {"_id": ObjectId(user_id)},
            {"$set": {"isActive": True, "updatedAt": _now()}},
            projection=PUBLIC_FIELDS,
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            return None
        logger.info("Activated user %s", user_id)
        return UserRead.from_document(document)

    @classmethod
    async def delete_user_permanently(cls, user_id: str) -> bool:
        """Remove the user from the store.  ``False`` if not found."""
        users = get_users_collection()
        result = await run_in_threadpool(users.delete_one, {"_id": ObjectId(user_id)})
        if result.deleted_count:
            logger.info("Permanently deleted user %s", user_id)
        return result.deleted_count > 0
