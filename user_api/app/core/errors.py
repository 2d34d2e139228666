"""
Terminal error handling.

``register_exception_handlers`` installs the handlers that turn
anything a route did not answer itself into the JSON error envelope:

* request validation failures → 400 with one entry per invalid field;
* unmatched routes → 404, other HTTP errors keep their status;
* malformed record IDs → 404 ``Resource not found``;
* duplicate keys (e.g. an email already in use) → 400;
* anything else → 500 ``Server Error``.  Outside production the
  exception text is added as ``detail``.
"""

import logging
from typing import Any, Dict, List, Optional

from bson.errors import InvalidId
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..schemas.common import ErrorEnvelope, FieldError, ValidationErrorEnvelope
from ..schemas.user import RULE_ERROR, field_message
from .config import settings

logger = logging.getLogger(__name__)

BODY_MESSAGES = {
    "missing": "Request body is required",
    "json_invalid": "Invalid JSON body",
    "model_attributes_type": "Request body must be a JSON object",
    "dict_type": "Request body must be a JSON object",
}


def _error_response(status_code: int, message: str, detail: Optional[str] = None) -> JSONResponse:
    envelope = ErrorEnvelope(error=message, detail=detail)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


def describe_validation_errors(errors: List[Dict[str, Any]]) -> List[FieldError]:
    """Map pydantic error dicts to ``FieldError`` entries, in order."""
    described = []
    for error in errors:
        loc = tuple(error.get("loc", ()))
        error_type = error.get("type", "")
        if loc[:1] == ("body",) and (len(loc) == 1 or error_type == "json_invalid"):
            field = "body"
            message = BODY_MESSAGES.get(error_type, error.get("msg", "Invalid request body"))
        elif loc[:1] == ("body",):
            field = ".".join(str(part) for part in loc[1:])
            if error_type == RULE_ERROR:
                message = error["msg"]
            else:
                message = field_message(field, error_type, error.get("msg", "Invalid value"))
        else:
            field = str(loc[-1]) if loc else "request"
            message = error.get("msg", "Invalid value")
        described.append(FieldError(field=field, message=message))
    return described


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    envelope = ValidationErrorEnvelope(errors=describe_validation_errors(exc.errors()))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=envelope.model_dump())


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return _error_response(exc.status_code, f"Route {request.url.path} not found")
    response = _error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def handle_invalid_id(request: Request, exc: InvalidId) -> JSONResponse:
    logger.info("Malformed id in %s %s: %s", request.method, request.url.path, exc)
    return _error_response(status.HTTP_404_NOT_FOUND, "Resource not found")


async def handle_duplicate_key(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    logger.info("Duplicate key on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(status.HTTP_400_BAD_REQUEST, "Duplicate field value entered")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = None if settings.is_production else str(exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server Error", detail)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(InvalidId, handle_invalid_id)
    app.add_exception_handler(DuplicateKeyError, handle_duplicate_key)
    app.add_exception_handler(Exception, handle_unexpected_error)
