"""Admin API tests: first-run setup guard, reset-password, status, info."""

import pytest

from folio.auth.password import hash_password
from folio.services.admin_setup import setup_admin


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ═══════════════════════════════════════════════════════════
# Status
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_status_before_setup(client):
    r = await client.get("/api/admin/status")
    assert r.status_code == 200
    assert r.json() == {"adminExists": False, "adminCount": 0, "setupRequired": True}


@pytest.mark.asyncio
async def test_status_after_setup(client, store):
    await setup_admin(store, "owner@example.com", "pw123456")
    r = await client.get("/api/admin/status")
    assert r.json() == {"adminExists": True, "adminCount": 1, "setupRequired": False}


# ═══════════════════════════════════════════════════════════
# Setup
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_setup_creates_first_admin(client):
    r = await client.post(
        "/api/admin/setup",
        json={"email": "Owner@Example.com", "password": "pw123456"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Admin user created successfully"
    assert body["user"]["email"] == "owner@example.com"
    assert body["user"]["role"] == "admin"
    assert "password_hash" not in body["user"]

    login = await client.post(
        "/api/auth/login",
        json={"email": "owner@example.com", "password": "pw123456"},
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_setup_refused_once_any_admin_exists(client, store):
    await setup_admin(store, "owner@example.com", "pw123456")

    # A different email must not get through either
    r = await client.post(
        "/api/admin/setup",
        json={"email": "intruder@example.com", "password": "pw123456"},
    )
    assert r.status_code == 403
    assert "already exists" in r.json()["error"]
    assert await store.find_by_email("intruder@example.com") is None


@pytest.mark.asyncio
async def test_setup_cannot_reset_existing_admin_password(client, store):
    await setup_admin(store, "owner@example.com", "pw123456")

    r = await client.post(
        "/api/admin/setup",
        json={"email": "owner@example.com", "password": "hijacked-pw", "force": True},
    )
    assert r.status_code == 403

    login = await client.post(
        "/api/auth/login",
        json={"email": "owner@example.com", "password": "pw123456"},
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_setup_allowed_when_only_non_admins_exist(client, store):
    await store.upsert_by_email("editor@example.com", hash_password("pw123456"), role="editor")
    r = await client.post(
        "/api/admin/setup",
        json={"email": "owner@example.com", "password": "pw123456"},
    )
    assert r.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"email": "owner@example.com", "password": "short"},
        {"email": "not-an-email", "password": "pw123456"},
        {"password": "pw123456"},
    ],
)
async def test_setup_validation(client, body):
    r = await client.post("/api/admin/setup", json=body)
    assert r.status_code == 400
    assert r.json()["error"] == "Validation failed"


# ═══════════════════════════════════════════════════════════
# Reset password
# ═══════════════════════════════════════════════════════════


async def _admin_token(client, store):
    await setup_admin(store, "owner@example.com", "pw123456")
    r = await client.post(
        "/api/auth/login",
        json={"email": "owner@example.com", "password": "pw123456"},
    )
    return r.json()["token"]


@pytest.mark.asyncio
async def test_reset_password(client, store):
    token = await _admin_token(client, store)

    r = await client.post(
        "/api/admin/reset-password",
        json={"newPassword": "reset-password-1"},
        headers=_auth(token),
    )
    assert r.status_code == 200
    assert r.json() == {"message": "Password updated successfully"}

    login = await client.post(
        "/api/auth/login",
        json={"email": "owner@example.com", "password": "reset-password-1"},
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_reset_password_without_token(client):
    r = await client.post("/api/admin/reset-password", json={"newPassword": "reset-password-1"})
    assert r.status_code == 401
    assert r.json() == {"error": "No token provided"}


@pytest.mark.asyncio
async def test_reset_password_with_user_role_token(client, make_token):
    r = await client.post(
        "/api/admin/reset-password",
        json={"newPassword": "reset-password-1"},
        headers=_auth(make_token(role="user")),
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Admin access required"}


@pytest.mark.asyncio
async def test_reset_password_for_unknown_identity(client, make_token):
    r = await client.post(
        "/api/admin/reset-password",
        json={"newPassword": "reset-password-1"},
        headers=_auth(make_token(id="00000000-0000-0000-0000-00000000beef")),
    )
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Info
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_info(client, store):
    token = await _admin_token(client, store)
    r = await client.get("/api/admin/info", headers=_auth(token))
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["email"] == "owner@example.com"
    assert user["role"] == "admin"
    assert "createdAt" in user and "updatedAt" in user


@pytest.mark.asyncio
async def test_info_requires_admin(client, make_token):
    r = await client.get("/api/admin/info", headers=_auth(make_token(role="user")))
    assert r.status_code == 403
