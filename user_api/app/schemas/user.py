"""
Pydantic models for user data.

``UserCreate`` and ``UserUpdate`` are the validation layer for write
requests: pydantic collects every failing field, and the request
validation handler in ``core.errors`` turns those failures into the
``{field, message}`` list returned to the client, using the messages
defined here.  ``UserRead`` is the only shape in which a user leaves the
API and has no password field.

JSON keys are camelCase (``isActive``, ``createdAt``); Python
attributes are snake_case.
"""

import re
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Literal, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

MUTABLE_FIELDS = ("name", "email", "password", "age", "role", "is_active")

NAME_MESSAGE = "Name must be between 2 and 50 characters"
EMAIL_MESSAGE = "Please enter a valid email"
PASSWORD_LENGTH_MESSAGE = "Password must be at least 6 characters long"
PASSWORD_STRENGTH_MESSAGE = (
    "Password must contain at least one lowercase letter, one uppercase letter, and one number"
)
AGE_MESSAGE = "Age must be a number between 0 and 120"
ROLE_MESSAGE = "Role must be either user or admin"
IS_ACTIVE_MESSAGE = "isActive must be a boolean value"

# Message reported when a field fails its type or constraint check.
FIELD_MESSAGES: Dict[str, str] = {
    "name": NAME_MESSAGE,
    "email": EMAIL_MESSAGE,
    "password": PASSWORD_LENGTH_MESSAGE,
    "age": AGE_MESSAGE,
    "role": ROLE_MESSAGE,
    "isActive": IS_ACTIVE_MESSAGE,
}

# Message reported when a required field is absent.
REQUIRED_MESSAGES: Dict[str, str] = {
    "name": "Name is required",
    "email": EMAIL_MESSAGE,
    "password": PASSWORD_LENGTH_MESSAGE,
}

# Error type used by the custom validators below; its message is
# reported verbatim.
RULE_ERROR = "user_rule"

_PASSWORD_STRENGTH = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
BOOLEAN_STRINGS = {"true": True, "false": False, "1": True, "0": False}

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
Password = Annotated[str, StringConstraints(min_length=6)]
Age = Annotated[int, Field(ge=0, le=120)]
Role = Literal["user", "admin"]


def field_message(field: str, error_type: str, default: str) -> str:
    """Return the client‑facing message for a failed field rule."""
    if error_type == "missing":
        return REQUIRED_MESSAGES.get(field, f"{field} is required")
    return FIELD_MESSAGES.get(field, default)


def normalize_email(value: str) -> str:
    """Validate email grammar and return the address in lowercase."""
    try:
        result = validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError(RULE_ERROR, EMAIL_MESSAGE)
    return result.normalized.lower()


def check_password_strength(value: str) -> str:
    if not _PASSWORD_STRENGTH.match(value):
        raise PydanticCustomError(RULE_ERROR, PASSWORD_STRENGTH_MESSAGE)
    return value


def reject_boolean_age(value: Any) -> Any:
    # JSON true/false would otherwise pass as 1/0.
    if isinstance(value, bool):
        raise PydanticCustomError(RULE_ERROR, AGE_MESSAGE)
    return value


def parse_active_flag(value: Any) -> Any:
    """Accept a boolean, or its string or 0/1 spelling.

    Anything else (``"yes"``, ``2``, ``"maybe"``) is rejected.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value in BOOLEAN_STRINGS:
        return BOOLEAN_STRINGS[value]
    if isinstance(value, int) and value in (0, 1):
        return value == 1
    raise PydanticCustomError(RULE_ERROR, IS_ACTIVE_MESSAGE)


class _UserModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(_UserModel):
    """Payload for ``POST /api/users``.

    ``name``, ``email`` and ``password`` are required; ``age`` and
    ``role`` are optional.  Unknown keys are dropped.
    """

    name: Name = Field(..., examples=["Ann Lee"])
    email: str = Field(..., examples=["ann@example.com"])
    password: Password = Field(..., examples=["Abcdef1"])
    age: Optional[Age] = Field(None, examples=[30])
    role: Role = Field("user", examples=["user"])

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        return check_password_strength(value)

    @field_validator("age", mode="before")
    @classmethod
    def _age(cls, value: Any) -> Any:
        return reject_boolean_age(value)


class UserUpdate(_UserModel):
    """Payload for ``PUT /api/users/{id}``.

    Every field is optional and validated only when present.  A field
    sent as ``null`` is treated as not sent.  Keys outside
    ``MUTABLE_FIELDS`` are dropped, so they can never reach the store.
    """

    name: Optional[Name] = None
    email: Optional[str] = None
    password: Optional[Password] = None
    age: Optional[Age] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def _email(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else normalize_email(value)

    @field_validator("password")
    @classmethod
    def _password(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else check_password_strength(value)

    @field_validator("age", mode="before")
    @classmethod
    def _age(cls, value: Any) -> Any:
        return reject_boolean_age(value)

    @field_validator("is_active", mode="before")
    @classmethod
    def _is_active(cls, value: Any) -> Any:
        return parse_active_flag(value)

    def changes(self) -> Dict[str, Any]:
        """Return the provided fields keyed by their stored (camelCase) name."""
        provided = self.model_dump(include=set(MUTABLE_FIELDS), exclude_none=True)
        return {to_camel(key): value for key, value in provided.items()}


class UserRead(_UserModel):
    """Schema for reading a user from the API."""

    id: str
    name: str
    email: str
    age: Optional[int] = None
    role: Role = "user"
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Stored timestamps are UTC; naive values come from a client
        # opened without tz_aware.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserRead":
        """Build from a stored document.

        ``_id`` becomes ``id``; ``password`` and other stored keys are
        ignored.
        """
        data = {key: value for key, value in document.items() if key not in ("_id", "password")}
        data["id"] = str(document["_id"])
        return cls.model_validate(data)
