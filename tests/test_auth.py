"""Tests for authentication endpoints and token enforcement."""
import time
from datetime import timedelta

import jwt
import pytest

from inventory.config import Settings, get_settings
from inventory.main import app
from inventory.utils.security import create_access_token, decode_token, hash_password, verify_password

TEST_SETTINGS = Settings(AUTH_REQUIRED=True, JWT_SECRET="test-secret-key-for-the-inventory-tests")


@pytest.fixture
def secured():
    """Require bearer tokens for the duration of a test."""
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    yield TEST_SETTINGS
    app.dependency_overrides.pop(get_settings, None)


def register(client, username="alice", password="s3cret", **extra):
    return client.post(
        "/api/auth/register",
        json={"username": username, "password": password, **extra}
    )


def test_register(client):
    response = register(client, email="alice@example.com")

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert isinstance(data["userId"], int)


def test_register_duplicate_username(client):
    register(client)

    response = register(client)

    assert response.status_code == 400
    assert response.json()["error"] == "Username exists"


def test_register_missing_fields(client):
    response = client.post("/api/auth/register", json={"username": "bob"})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing body"


def test_login(client):
    """Test login returns a token carrying id, username and role."""
    user_id = register(client).json()["userId"]

    response = client.post(
        "/api/auth/login",
        json={"username": "alice", "password": "s3cret"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"] == {"id": user_id, "username": "alice", "role": "user"}

    claims = decode_token(data["token"])
    assert claims["userId"] == user_id
    assert claims["username"] == "alice"
    assert claims["role"] == "user"


def test_login_wrong_password(client):
    register(client)

    response = client.post(
        "/api/auth/login",
        json={"username": "alice", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_login_unknown_user(client):
    response = client.post(
        "/api/auth/login",
        json={"username": "nobody", "password": "x"}
    )

    assert response.status_code == 401


def test_products_open_when_auth_disabled(client):
    assert client.get("/api/products").status_code == 200


def test_products_require_token(client, secured):
    """Test protected routes reject requests without a token."""
    response = client.get("/api/products")

    assert response.status_code == 401
    assert response.json()["error"] == "Access Token Required"


def test_upload_requires_token(client, secured):
    response = client.post(
        "/api/upload",
        files={"file": ("a.png", b"x", "image/png")}
    )

    assert response.status_code == 401


def test_products_accept_login_token(client, secured):
    register(client)
    token = client.post(
        "/api/auth/login",
        json={"username": "alice", "password": "s3cret"}
    ).json()["token"]

    response = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


def test_products_reject_invalid_token(client, secured):
    response = client.get("/api/products", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 403
    assert response.json()["error"] == "Invalid Token"


def test_products_reject_expired_token(client, secured):
    """Test tokens are rejected once their window has passed."""
    token = create_access_token(
        1, "alice", "user", settings=secured, expires_delta=timedelta(seconds=-1)
    )

    response = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403


def test_token_expires_after_24_hours():
    settings = Settings(JWT_SECRET="test-secret-key-for-the-inventory-tests")
    token = create_access_token(7, "carol", "admin", settings=settings)

    claims = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
    assert abs(claims["exp"] - (time.time() + 24 * 60 * 60)) < 60


def test_password_hashing():
    hashed = hash_password("s3cret")

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)
