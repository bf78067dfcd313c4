"""Every failure leaves the API in the same envelope.

{status, error, message, timestamp} — domain errors, framework errors
(unknown route, wrong method) and validation errors alike.
"""

from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taskboard.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    TaskNotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from taskboard.main import app
from taskboard.services.task_service import TaskService


def _assert_envelope(body: dict, status: int):
    assert body["status"] == status
    assert isinstance(body["error"], str) and body["error"]
    assert isinstance(body["message"], str) and body["message"]
    # ISO-8601, parseable
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


@pytest.mark.parametrize(
    "exc_cls,status",
    [
        (DuplicateEmailError, 409),
        (TaskNotFoundError, 404),
        (UnauthorizedError, 403),
        (UserNotFoundError, 404),
        (InvalidCredentialsError, 401),
        (InvalidTokenError, 401),
    ],
)
def test_error_taxonomy_status_codes(exc_cls, status):
    exc = exc_cls()
    assert exc.status_code == status
    assert exc.message


def test_invalid_token_error_advertises_bearer():
    assert InvalidTokenError().headers == {"WWW-Authenticate": "Bearer"}


@pytest.mark.asyncio
async def test_domain_error_envelope(client):
    r = await client.post("/api/auth/login", json={"email": "no@x.com", "password": "pw"})
    assert r.status_code == 404
    _assert_envelope(r.json(), 404)
    assert r.json()["error"] == "Not Found"


@pytest.mark.asyncio
async def test_unauthenticated_envelope(client):
    r = await client.get("/api/tasks")
    _assert_envelope(r.json(), 401)
    assert r.json()["error"] == "Unauthorized"


@pytest.mark.asyncio
async def test_unknown_route_envelope(client):
    r = await client.get("/api/does-not-exist")
    assert r.status_code == 404
    _assert_envelope(r.json(), 404)


@pytest.mark.asyncio
async def test_wrong_method_envelope(client):
    r = await client.patch("/api/auth/login", json={})
    assert r.status_code == 405
    _assert_envelope(r.json(), 405)


@pytest.mark.asyncio
async def test_validation_envelope_hides_input(client):
    r = await client.post(
        "/api/auth/register",
        json={"name": "", "email": "a@x.com", "password": "hunter2"},
    )
    assert r.status_code == 422
    body = r.json()
    _assert_envelope(body, 422)
    errors = body["details"]["errors"]
    assert errors and errors[0]["loc"][-1] == "name"
    assert "hunter2" not in r.text


# ═══════════════════════════════════════════════════════════
# Unexpected server errors
# ═══════════════════════════════════════════════════════════


@pytest_asyncio.fixture()
async def lenient_client(client):
    """Like `client`, but server errors come back as responses, not raised.

    Starlette re-raises after the catch-all handler has answered; the
    transport flag keeps that from failing the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_unexpected_error_envelope(lenient_client, make_user, monkeypatch):
    alice = await make_user()

    async def explode(self, email):
        raise RuntimeError("database fell over: secret-internal-detail")

    monkeypatch.setattr(TaskService, "list_tasks", explode)

    r = await lenient_client.get("/api/tasks", headers=alice["headers"])
    assert r.status_code == 500
    body = r.json()
    _assert_envelope(body, 500)
    assert body["error"] == "Internal Server Error"
    assert body["message"] == "Internal error"
    assert "secret-internal-detail" not in r.text
