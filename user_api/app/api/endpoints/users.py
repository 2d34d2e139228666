"""
User endpoints.

CRUD over user records: list with filters and pagination, fetch,
create, partial update, soft delete (deactivate), reactivate and
permanent delete.  Request bodies are validated by ``UserCreate`` and
``UserUpdate`` before a handler runs; a missing user is answered here
with a 404 envelope.  Everything else (store failures, malformed IDs)
propagates to the application's error handlers.
"""

from typing import Any, Dict, List, Optional, Type, Union

from fastapi import APIRouter, Query, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from user_api.app.core.config import settings
from user_api.app.schemas.common import (
    EmptyEnvelope,
    ErrorEnvelope,
    UserEnvelope,
    UserListEnvelope,
    ValidationErrorEnvelope,
)
from user_api.app.schemas.user import UserCreate, UserUpdate
from user_api.app.services.user_service import UserService

router = APIRouter()

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorEnvelope}}
INVALID = {status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorEnvelope}}


def user_not_found() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorEnvelope(error="User not found").model_dump(exclude_none=True),
    )


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """Parse a query parameter, falling back to ``default`` when it is
    absent, not a number, or less than 1."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def missing_body_errors(model: Type[BaseModel]) -> List[Dict[str, Any]]:
    """Validate an empty object against ``model``.

    An absent body is reported field by field, the same way as ``{}``.
    """
    try:
        model.model_validate({})
    except ValidationError as exc:
        return [{**error, "loc": ("body", *error["loc"])} for error in exc.errors()]
    return []


@router.get("", response_model=UserListEnvelope, response_model_exclude_none=True)
async def list_users(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Page size"),
    is_active: Optional[str] = Query(None, alias="isActive", description="'true' for active users only"),
    role: Optional[str] = Query(None, description="Exact role match"),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or email"),
) -> UserListEnvelope:
    """List users, newest first.

    - **page**, **limit**: pagination; ``page`` is capped at ``MAX_PAGE``
      and ``limit`` at ``MAX_PAGE_LIMIT``.
    - **isActive**: ``true`` selects active users, any other value
      inactive ones.
    - **role**, **search**: optional filters, combined with AND.
    """
    page_number = min(parse_positive_int(page, 1), settings.max_page)
    page_size = min(parse_positive_int(limit, settings.default_page_limit), settings.max_page_limit)
    active_filter = None if is_active is None else is_active == "true"

    result = await UserService.list_users(
        page=page_number,
        limit=page_size,
        is_active=active_filter,
        role=role,
        search=search,
    )
    return UserListEnvelope(
        count=len(result.users),
        total=result.total,
        page=result.page,
        pages=result.pages,
        data=result.users,
    )


@router.get("/{user_id}", response_model=UserEnvelope, response_model_exclude_none=True, responses=NOT_FOUND)
async def get_user(user_id: str) -> Union[UserEnvelope, JSONResponse]:
    user = await UserService.get_user(user_id)
    if user is None:
        return user_not_found()
    return UserEnvelope(data=user)


@router.post(
    "",
    response_model=UserEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=INVALID,
)
async def create_user(payload: Optional[UserCreate] = None) -> UserEnvelope:
    """Create a user.  The response never includes the password."""
    if payload is None:
        raise RequestValidationError(missing_body_errors(UserCreate))
    user = await UserService.create_user(payload)
    return UserEnvelope(data=user)


@router.put(
    "/{user_id}",
    response_model=UserEnvelope,
    response_model_exclude_none=True,
    responses={**NOT_FOUND, **INVALID},
)
async def update_user(
    user_id: str, payload: Optional[UserUpdate] = None
) -> Union[UserEnvelope, JSONResponse]:
    """Update only the fields present in the body.

    Writable fields: ``name``, ``email``, ``password``, ``age``,
    ``role`` and ``isActive``.  Other keys are ignored, and a request
    without a body changes nothing.
    """
    if payload is None:
        payload = UserUpdate()
    user = await UserService.update_user(user_id, payload)
    if user is None:
        return user_not_found()
    return UserEnvelope(data=user)


@router.delete("/{user_id}", response_model=EmptyEnvelope, response_model_exclude_none=True, responses=NOT_FOUND)
async def deactivate_user(user_id: str) -> Union[EmptyEnvelope, JSONResponse]:
    """Soft delete: the user stays readable with ``isActive`` false."""
    if not await UserService.deactivate_user(user_id):
        return user_not_found()
    return EmptyEnvelope(message="User deactivated successfully")


@router.delete(
    "/{user_id}/permanent",
    response_model=EmptyEnvelope,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def delete_user_permanently(user_id: str) -> Union[EmptyEnvelope, JSONResponse]:
    if not await UserService.delete_user_permanently(user_id):
        return user_not_found()
    return EmptyEnvelope(message="User permanently deleted")


@router.patch(
    "/{user_id}/activate",
    response_model=UserEnvelope,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def activate_user(user_id: str) -> Union[UserEnvelope, JSONResponse]:
    user = await UserService.activate_user(user_id)
    if user is None:
        return user_not_found()
    return UserEnvelope(data=user, message="User activated successfully")
