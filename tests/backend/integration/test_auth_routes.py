import uuid

import pytest

from app.models.user import Role, User


pytestmark = pytest.mark.asyncio


async def register_user(client, email: str, password: str, name: str | None = None):
    return await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )


async def login_user(client, email: str, password: str):
    return await client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
    )


async def test_register_and_login_flow(client):
    email = f"user_{uuid.uuid4().hex[:6]}@example.com"
    password = "StrongPass!23"

    resp = await register_user(client, email.upper(), password, name="Ivy")
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["user"]["email"] == email
    assert body["user"]["role"] == "ic"
    assert body["user"]["isActive"] is True
    assert "passwordHash" not in body["user"]
    assert body["accessToken"]

    # Duplicate email should fail
    dup_resp = await register_user(client, email, password)
    assert dup_resp.status_code == 409
    assert dup_resp.json() == {"error": "User with this email already exists"}

    # Successful login
    login_resp = await login_user(client, email, password)
    login_body = login_resp.json()
    assert login_resp.status_code == 200
    assert login_body["success"] is True
    assert "accessToken" in login_body
    assert "accessToken" in login_resp.cookies
    assert (await User.get(email=email)).last_login_at is not None

    # Invalid password
    bad_login = await login_user(client, email, "wrong")
    assert bad_login.status_code == 401
    assert bad_login.json() == {"error": "Incorrect email or password"}

    unknown = await login_user(client, "nobody@example.com", password)
    assert unknown.status_code == 401


async def test_register_rejects_short_password(client):
    resp = await register_user(client, "short@example.com", "12345")
    assert resp.status_code == 400
    assert "password" in resp.json()["error"]


async def test_me_and_logout(client):
    email = f"user_{uuid.uuid4().hex[:6]}@example.com"
    password = "UserInit#123"
    await register_user(client, email, password)

    login_resp = await login_user(client, email, password)
    token = login_resp.json()["accessToken"]
    headers = {"Authorization": f"Bearer {token}"}

    me_resp = await client.get("/api/auth/me", headers=headers)
    assert me_resp.status_code == 200
    assert me_resp.json()["user"]["email"] == email

    # Cookie alone also authenticates
    cookie_resp = await client.get("/api/auth/me")
    assert cookie_resp.status_code == 200

    logout_resp = await client.post("/api/auth/logout")
    assert logout_resp.status_code == 200
    assert logout_resp.json() == {"success": True}
    client.cookies.clear()

    assert (await client.get("/api/auth/me")).status_code == 401


async def test_inactive_accounts_are_locked_out(client, create_user):
    user = await create_user(Role.IC, is_active=False)

    resp = await login_user(client, user.email, "UserPass!23")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Account is not active"}


async def test_token_of_deactivated_user_is_rejected(client, create_user, auth_header_factory):
    user = await create_user(Role.MANAGER)
    headers = await auth_header_factory(user)
    user.is_active = False
    await user.save()

    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 401


async def test_garbage_token_is_rejected(client):
    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
