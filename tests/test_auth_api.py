"""Auth API tests — register, login, token-protected /me.

Uses the real auth pipeline end to end: register over HTTP, take the
token from the response, present it as a Bearer header.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest


def _email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_returns_token_and_username(client, issuer):
    email = _email("reg")
    r = await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": email, "password": "pw1"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "Alice"
    assert issuer.verify(body["token"]) == email


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    email = _email("dup")
    body = {"name": "User 1", "email": email, "password": "pw1"}

    r1 = await client.post("/api/auth/register", json=body)
    assert r1.status_code == 200

    r2 = await client.post("/api/auth/register", json={**body, "name": "User 2"})
    assert r2.status_code == 409
    err = r2.json()
    assert err["status"] == 409
    assert err["error"] == "Conflict"
    assert err["message"] == "Email already registered"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": "a@x.com", "password": "pw"},
        {"name": "", "email": "a@x.com", "password": "pw"},
        {"name": "A", "email": "not-an-email", "password": "pw"},
        {"name": "A", "email": "a@x.com", "password": ""},
    ],
)
async def test_register_validation(client, payload):
    r = await client.post("/api/auth/register", json=payload)
    assert r.status_code == 422
    assert r.json()["status"] == 422
    assert r.json()["message"] == "Invalid request payload"


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client, make_user, issuer):
    user = await make_user(name="Login User")
    r = await client.post(
        "/api/auth/login",
        json={"email": user["email"], "password": user["password"]},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "Login User"
    assert issuer.verify(body["token"]) == user["email"]


@pytest.mark.asyncio
async def test_login_wrong_password(client, make_user):
    user = await make_user()
    r = await client.post(
        "/api/auth/login",
        json={"email": user["email"], "password": "wrong_password"},
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    r = await client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "whatever"},
    )
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


# ═══════════════════════════════════════════════════════════
# Protected endpoint (/me)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client, make_user):
    user = await make_user(name="Me User")
    r = await client.get("/api/auth/me", headers=user["headers"])
    assert r.status_code == 200
    body = r.json()
    assert body["email"] == user["email"]
    assert body["name"] == "Me User"
    assert "id" in body


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert r.json()["message"] == "Authentication required"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    ["Bearer invalid_token_here", "Bearer ", "Basic dXNlcjpwYXNz", "token-without-scheme"],
)
async def test_me_with_bad_authorization_header(client, header):
    r = await client.get("/api/auth/me", headers={"Authorization": header})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(client, make_user, issuer):
    user = await make_user()
    stale = issuer.issue(user["email"], now=datetime.now(timezone.utc) - timedelta(days=2))
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {stale}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_me_for_subject_without_account(client, issuer):
    """A validly signed token whose email has no account resolves to 404."""
    token = issuer.issue("ghost@example.com")
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_token_from_login_and_register_both_work(client, make_user):
    user = await make_user()
    r = await client.post(
        "/api/auth/login",
        json={"email": user["email"], "password": user["password"]},
    )
    login_token = r.json()["token"]

    for token in (user["token"], login_token):
        r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
