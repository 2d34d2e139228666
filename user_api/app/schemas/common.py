"""
Response envelopes.

Every response body carries ``success``.  Successful responses put the
payload under ``data``; failures carry either ``error`` (a single
message) or ``errors`` (one entry per invalid field).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .user import UserRead


class Envelope(BaseModel):
    success: bool = True
    message: Optional[str] = None


class UserEnvelope(Envelope):
    data: UserRead


class UserListEnvelope(Envelope):
    """One page of users plus the totals needed to page through the rest."""

    count: int = Field(..., description="Number of records in this page")
    total: int = Field(..., description="Number of records matching the filters")
    page: int
    pages: int
    data: List[UserRead]


class EmptyEnvelope(Envelope):
    data: Dict[str, Any] = Field(default_factory=dict)


class HealthEnvelope(Envelope):
    timestamp: datetime
    environment: str


class FieldError(BaseModel):
    field: str
    message: str


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: str
    detail: Optional[str] = None


class ValidationErrorEnvelope(BaseModel):
    success: bool = False
    errors: List[FieldError]
