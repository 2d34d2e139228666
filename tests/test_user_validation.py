from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from user_api.app.schemas.user import (
    AGE_MESSAGE,
    EMAIL_MESSAGE,
    IS_ACTIVE_MESSAGE,
    NAME_MESSAGE,
    PASSWORD_LENGTH_MESSAGE,
    PASSWORD_STRENGTH_MESSAGE,
    ROLE_MESSAGE,
    UserCreate,
    UserUpdate,
)


def _errors(response) -> list[dict]:
    assert response.status_code == 400, response.text
    body = response.json()
    assert body["success"] is False
    return body["errors"]


def test_create_normalizes_email_and_trims_name() -> None:
    user = UserCreate(name="  Ann Lee ", email="ANN@Example.COM", password="Abcdef1")
    assert user.name == "Ann Lee"
    assert user.email == "ann@example.com"
    assert user.role == "user"
    assert user.age is None


def test_create_requires_name_email_and_password(client: TestClient) -> None:
    errors = _errors(client.post("/api/users", json={}))
    assert errors == [
        {"field": "name", "message": "Name is required"},
        {"field": "email", "message": EMAIL_MESSAGE},
        {"field": "password", "message": PASSWORD_LENGTH_MESSAGE},
    ]


def test_create_reports_every_invalid_field(client: TestClient, users) -> None:
    payload = {
        "name": "A",
        "email": "not-an-email",
        "password": "abcdefg",
        "age": 121,
        "role": "root",
    }
    errors = _errors(client.post("/api/users", json=payload))
    assert errors == [
        {"field": "name", "message": NAME_MESSAGE},
        {"field": "email", "message": EMAIL_MESSAGE},
        {"field": "password", "message": PASSWORD_STRENGTH_MESSAGE},
        {"field": "age", "message": AGE_MESSAGE},
        {"field": "role", "message": ROLE_MESSAGE},
    ]
    assert users.count_documents({}) == 0


@pytest.mark.parametrize(
    "password, message",
    [
        ("Ab1", PASSWORD_LENGTH_MESSAGE),
        ("abcdef1", PASSWORD_STRENGTH_MESSAGE),
        ("ABCDEF1", PASSWORD_STRENGTH_MESSAGE),
        ("Abcdefg", PASSWORD_STRENGTH_MESSAGE),
    ],
)
def test_password_rules(password: str, message: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        UserCreate(name="Ann Lee", email="ann@example.com", password=password)
    (error,) = excinfo.value.errors()
    assert error["loc"] == ("password",)
    if message == PASSWORD_STRENGTH_MESSAGE:
        assert error["msg"] == message


def test_name_longer_than_fifty_is_rejected(client: TestClient) -> None:
    payload = {"name": "x" * 51, "email": "ann@example.com", "password": "Abcdef1"}
    assert _errors(client.post("/api/users", json=payload)) == [
        {"field": "name", "message": NAME_MESSAGE}
    ]


def test_age_bounds_are_inclusive() -> None:
    assert UserCreate(name="Ann", email="a@example.com", password="Abcdef1", age=0).age == 0
    assert UserCreate(name="Ann", email="a@example.com", password="Abcdef1", age=120).age == 120
    with pytest.raises(ValidationError):
        UserCreate(name="Ann", email="a@example.com", password="Abcdef1", age=-1)


def test_non_integer_age_is_rejected(client: TestClient) -> None:
    payload = {"name": "Ann", "email": "a@example.com", "password": "Abcdef1", "age": "old"}
    assert _errors(client.post("/api/users", json=payload)) == [
        {"field": "age", "message": AGE_MESSAGE}
    ]


def test_update_accepts_empty_payload() -> None:
    assert UserUpdate().changes() == {}


def test_update_changes_use_stored_field_names() -> None:
    update = UserUpdate.model_validate({"isActive": False, "email": "New@Example.com", "age": None})
    assert update.changes() == {"isActive": False, "email": "new@example.com"}


def test_update_drops_unknown_fields() -> None:
    update = UserUpdate.model_validate({"name": "Ann Lee", "createdAt": "2020-01-01", "_id": "abc"})
    assert update.changes() == {"name": "Ann Lee"}


def test_update_rejects_non_boolean_active_flag(client: TestClient, create_user) -> None:
    user = create_user()
    errors = _errors(client.put(f"/api/users/{user['id']}", json={"isActive": "maybe", "age": 200}))
    assert errors == [
        {"field": "age", "message": AGE_MESSAGE},
        {"field": "isActive", "message": IS_ACTIVE_MESSAGE},
    ]


def test_update_validates_password_when_present(client: TestClient, create_user) -> None:
    user = create_user()
    errors = _errors(client.put(f"/api/users/{user['id']}", json={"password": "weakpass"}))
    assert errors == [{"field": "password", "message": PASSWORD_STRENGTH_MESSAGE}]


def test_invalid_json_body(client: TestClient) -> None:
    response = client.post(
        "/api/users",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    errors = _errors(response)
    assert errors[0]["field"] == "body"


def test_create_without_body_reports_required_fields(client: TestClient, users) -> None:
    errors = _errors(client.post("/api/users"))
    assert errors == [
        {"field": "name", "message": "Name is required"},
        {"field": "email", "message": EMAIL_MESSAGE},
        {"field": "password", "message": PASSWORD_LENGTH_MESSAGE},
    ]
    assert users.count_documents({}) == 0


def test_boolean_age_is_rejected(client: TestClient, create_user, users) -> None:
    payload = {"name": "Ann", "email": "a@example.com", "password": "Abcdef1", "age": True}
    assert _errors(client.post("/api/users", json=payload)) == [
        {"field": "age", "message": AGE_MESSAGE}
    ]
    assert users.count_documents({}) == 0

    user = create_user()
    assert _errors(client.put(f"/api/users/{user['id']}", json={"age": False})) == [
        {"field": "age", "message": AGE_MESSAGE}
    ]


@pytest.mark.parametrize("value", ["yes", "TRUE", 2, 0.5, []])
def test_update_rejects_loose_active_values(client: TestClient, create_user, value) -> None:
    user = create_user()
    errors = _errors(client.put(f"/api/users/{user['id']}", json={"isActive": value}))
    assert errors == [{"field": "isActive", "message": IS_ACTIVE_MESSAGE}]
    assert client.get(f"/api/users/{user['id']}").json()["data"]["isActive"] is True


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), ("true", True), ("false", False), ("1", True), ("0", False), (1, True), (0, False)],
)
def test_update_accepts_boolean_spellings(value, expected: bool) -> None:
    assert UserUpdate.model_validate({"isActive": value}).is_active is expected
