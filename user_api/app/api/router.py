"""
Top‑level API router.

Aggregates the domain routers under a single router that the
application mounts at ``/api``.
"""

from fastapi import APIRouter

from .endpoints import health, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
# Health defines its own "/health" path.
router.include_router(health.router, tags=["health"])
