"""
Liveness endpoint.

``GET /api/health`` answers without touching the record store, so it
reports whether the process is serving requests, not whether MongoDB is
reachable.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from user_api.app.core.config import settings
from user_api.app.schemas.common import HealthEnvelope

router = APIRouter()


@router.get("/health", response_model=HealthEnvelope)
async def health() -> HealthEnvelope:
    return HealthEnvelope(
        message="Server is running!",
        timestamp=datetime.now(timezone.utc),
        environment=settings.environment,
    )
