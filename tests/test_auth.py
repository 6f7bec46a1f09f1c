import pytest
from fastapi import status
from sqlalchemy import select

from contact_book.crud import UserRepository
from contact_book.errors import NotFound
from contact_book.models import User
from contact_book.security import (
    generate_token,
    get_password_hash,
    parse_bearer,
    verify_password,
)
from contact_book.services import AuthService


def register(client, name="Alice Doe", email="alice@example.com", password="secret123"):
    response = client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == status.HTTP_201_CREATED, response.json()
    return response.json()["data"]


def login(client, email="alice@example.com", password="secret123"):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == status.HTTP_200_OK, response.json()
    return response.json()["data"]["access_token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_password_hashing_roundtrip():
    password = "secret123"
    hashed = get_password_hash(password)
    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("other-password", hashed)


def test_generated_tokens_are_distinct():
    assert generate_token() != generate_token()
    assert len(generate_token()) >= 32


def test_parse_bearer():
    assert parse_bearer("Bearer abc") == "abc"
    assert parse_bearer("  bearer   abc  ") == "abc"
    assert parse_bearer("Bearer ") is None
    assert parse_bearer("Basic abc") is None
    assert parse_bearer(None) is None


def test_register_stores_hashed_password(client, db_session):
    user = register(client)
    assert user["email"] == "alice@example.com"
    assert "password" not in user

    stored = db_session.execute(
        select(User).where(User.id == user["id"])
    ).scalar_one()
    assert stored.password != "secret123"
    assert verify_password("secret123", stored.password)
    assert stored.token is None


def test_register_duplicate_email(client):
    register(client)
    response = client.post(
        "/auth/register",
        json={"name": "Other", "email": "alice@example.com", "password": "secret123"},
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json() == {"error": "user already exists", "code": "conflict"}


def test_register_race_on_unique_email_is_conflict(client, monkeypatch):
    register(client)
    # Skip the pre-check so the unique index is what rejects the duplicate.
    monkeypatch.setattr(UserRepository, "get_by_email", lambda self, email: None)
    response = client.post(
        "/auth/register",
        json={"name": "Other", "email": "alice@example.com", "password": "secret123"},
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json() == {"error": "user already exists", "code": "conflict"}


def test_register_rejects_invalid_input(client):
    response = client.post(
        "/auth/register",
        json={"name": "Al", "email": "not-an-email", "password": "123"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["code"] == "validation_error"
    assert "email" in body["error"]


def test_login_returns_stored_token(client, db_session):
    user = register(client)
    response = client.post(
        "/auth/login", json={"email": "alice@example.com", "password": "secret123"}
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["access_token"]
    assert data["user"]["id"] == user["id"]

    stored = db_session.execute(
        select(User).where(User.id == user["id"])
    ).scalar_one()
    assert stored.token == data["access_token"]


def test_login_wrong_password(client):
    register(client)
    response = client.post(
        "/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "invalid_credentials"


def test_login_unknown_email(client):
    response = client.post(
        "/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "email or password is incorrect"


def test_me_returns_profile_and_token(client):
    register(client)
    token = login(client)
    response = client.get("/me", headers=bearer(token))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["user"]["email"] == "alice@example.com"
    assert data["access_token"] == token


def test_new_login_replaces_previous_token(client):
    register(client)
    first = login(client)
    second = login(client)
    assert first != second

    assert client.get("/me", headers=bearer(first)).status_code == 401
    assert client.get("/me", headers=bearer(second)).status_code == 200


def test_me_for_missing_user(db_session):
    service = AuthService(UserRepository(db_session))
    with pytest.raises(NotFound, match="user not found"):
        service.me(9999)


def test_gate_rejects_missing_header(client):
    response = client.get("/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Unauthorized", "code": "unauthorized"}
    assert response.headers["www-authenticate"] == "Bearer"


def test_gate_rejects_empty_token(client):
    response = client.get("/contacts", headers={"Authorization": "Bearer   "})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "token is required"


def test_gate_rejects_unknown_token(client):
    register(client)
    login(client)
    response = client.get("/users", headers=bearer("not-a-real-token"))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_health_and_root_are_public(client):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/").status_code == status.HTTP_200_OK
