import datetime as dt
import uuid

import pytest

from app.core.security import verify_password
from app.models.team import Team
from app.models.user import Role, User


pytestmark = pytest.mark.asyncio


async def test_invite_lifecycle(client, create_user, auth_header_factory, notifier):
    admin = await create_user(Role.ADMIN)
    headers = await auth_header_factory(admin)

    invite_resp = await client.post(
        "/api/users/invite", headers=headers, json={"email": "  New.Person@Example.com ", "role": "manager"}
    )
    assert invite_resp.status_code == 200, invite_resp.text
    body = invite_resp.json()
    assert body["message"] == "User invited successfully"
    invited = body["user"]
    assert invited["email"] == "new.person@example.com"
    assert invited["isActive"] is False
    assert invited["invitedBy"] == str(admin.id)
    assert "inviteToken" not in invited

    pending = await User.get(email="new.person@example.com")
    assert len(pending.invite_token) == 64
    remaining = pending.invite_expires - dt.datetime.now(dt.timezone.utc)
    assert dt.timedelta(days=6, hours=23) < remaining <= dt.timedelta(days=7)
    assert notifier.recipients() == ["new.person@example.com"]
    assert f"token={pending.invite_token}" in notifier.sent[0].text_body

    # Pending accounts cannot log in
    login = await client.post("/api/auth/login", json={"email": pending.email, "password": "whatever"})
    assert login.status_code == 401

    check = await client.get(f"/api/auth/invite/{pending.invite_token}")
    assert check.json() == {"valid": True, "email": "new.person@example.com", "role": "manager"}

    signup = await client.post(
        "/api/auth/signup-invite",
        json={"token": pending.invite_token, "password": "Chosen#123", "name": "New Person"},
    )
    assert signup.status_code == 200, signup.text
    assert signup.json()["user"]["isActive"] is True
    assert signup.json()["accessToken"]

    active = await User.get(id=pending.id)
    assert active.invite_token is None
    assert active.invite_expires is None
    assert active.name == "New Person"
    assert verify_password("Chosen#123", active.password_hash)

    # Token is single use
    again = await client.post("/api/auth/signup-invite", json={"token": pending.invite_token, "password": "Other#123"})
    assert again.status_code == 400
    assert again.json() == {"error": "Invalid or expired invite token"}
    assert (await client.get(f"/api/auth/invite/{pending.invite_token}")).json() == {"valid": False}

    # Active accounts cannot be re-invited
    resend = await client.post(f"/api/users/{pending.id}/resend-invite", headers=headers)
    assert resend.status_code == 400
    assert resend.json() == {"error": "User is already active"}


async def test_invite_with_team_and_failed_email(client, create_user, auth_header_factory, notifier):
    admin = await create_user(Role.ADMIN)
    manager = await create_user(Role.MANAGER)
    team = await Team.create(name="Platform", manager=manager)
    headers = await auth_header_factory(admin)
    notifier.fail = True

    resp = await client.post(
        "/api/users/invite", headers=headers, json={"email": "ic@example.com", "role": "ic", "teamId": str(team.id)}
    )

    assert resp.status_code == 200
    assert resp.json()["user"]["teamId"] == str(team.id)
    assert await User.filter(email="ic@example.com").exists()


async def test_invite_validation(client, create_user, auth_header_factory):
    admin = await create_user(Role.ADMIN)
    existing = await create_user(Role.IC)
    manager = await create_user(Role.MANAGER)
    team = await Team.create(name="Platform", manager=manager)
    headers = await auth_header_factory(admin)

    resp = await client.post("/api/users/invite", headers=headers, json={"email": existing.email.upper(), "role": "ic"})
    assert resp.status_code == 409
    assert resp.json() == {"error": "User with this email already exists"}

    resp = await client.post("/api/users/invite", headers=headers, json={"email": "a@example.com", "role": "owner"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid role: owner"}

    resp = await client.post(
        "/api/users/invite", headers=headers,
        json={"email": "b@example.com", "role": "manager", "teamId": str(team.id)},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Only IC users can be assigned to a team"}

    resp = await client.post(
        "/api/users/invite", headers=headers,
        json={"email": "c@example.com", "role": "ic", "teamId": str(uuid.uuid4())},
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "Team not found"}

    resp = await client.post("/api/users/invite", headers=headers, json={"role": "ic"})
    assert resp.status_code == 400


async def test_resend_invite_rotates_token(client, create_user, auth_header_factory, notifier):
    admin = await create_user(Role.ADMIN)
    headers = await auth_header_factory(admin)
    await client.post("/api/users/invite", headers=headers, json={"email": "late@example.com", "role": "ic"})
    pending = await User.get(email="late@example.com")
    old_token = pending.invite_token
    notifier.sent.clear()

    resp = await client.post(f"/api/users/{pending.id}/resend-invite", headers=headers)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Invite resent successfully"}
    refreshed = await User.get(id=pending.id)
    assert refreshed.invite_token != old_token
    assert notifier.recipients() == ["late@example.com"]
    assert (await client.get(f"/api/auth/invite/{old_token}")).json() == {"valid": False}

    missing = await client.post(f"/api/users/{uuid.uuid4()}/resend-invite", headers=headers)
    assert missing.status_code == 404


async def test_expired_invite_is_rejected(client, create_user, auth_header_factory):
    admin = await create_user(Role.ADMIN)
    headers = await auth_header_factory(admin)
    await client.post("/api/users/invite", headers=headers, json={"email": "old@example.com", "role": "ic"})
    pending = await User.get(email="old@example.com")
    pending.invite_expires = dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=1)
    await pending.save()

    assert (await client.get(f"/api/auth/invite/{pending.invite_token}")).json() == {"valid": False}
    resp = await client.post("/api/auth/signup-invite", json={"token": pending.invite_token, "password": "Chosen#123"})
    assert resp.status_code == 400


async def test_user_reads(client, create_user, auth_header_factory):
    admin = await create_user(Role.ADMIN)
    manager = await create_user(Role.MANAGER)
    ic = await create_user(Role.IC)
    other = await create_user(Role.IC)
    admin_headers = await auth_header_factory(admin)
    ic_headers = await auth_header_factory(ic)

    resp = await client.get("/api/users", headers=admin_headers)
    assert resp.status_code == 200
    emails = [u["email"] for u in resp.json()["users"]]
    assert emails[0] == other.email  # newest first
    assert set(emails) == {admin.email, manager.email, ic.email, other.email}

    assert (await client.get("/api/users", headers=ic_headers)).status_code == 403
    assert (await client.get(f"/api/users/{ic.id}", headers=ic_headers)).status_code == 200
    assert (await client.get(f"/api/users/{other.id}", headers=ic_headers)).status_code == 403
    manager_view = await client.get(f"/api/users/{other.id}", headers=await auth_header_factory(manager))
    assert manager_view.status_code == 200
    assert manager_view.json()["user"]["role"] == "ic"

    resp = await client.get(f"/api/users/{uuid.uuid4()}", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}
