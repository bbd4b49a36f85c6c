"""
Invite lifecycle

An invite is a pending, inactive user row carrying an opaque token. The
invitee activates the account by choosing a password through the setup
link; until then nobody can log in with it.
"""
import datetime as dt
import logging
from typing import Optional

from app.core.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    ensure_uuid,
    storage_guard,
)
from app.core.security import generate_invite_token, hash_password, unusable_password_hash
from app.models.goal import utc_now
from app.models.team import Team
from app.models.user import Role, User
from ..config import settings
from . import mailer

logger = logging.getLogger("uvicorn.error")


def _expiry() -> dt.datetime:
    return utc_now() + dt.timedelta(days=settings.invite_expire_days)


def _parse_role(role) -> Role:
    if not role:
        raise ValidationError("Role is required")
    try:
        return Role(role)
    except ValueError:
        raise ValidationError(f"Invalid role: {role}")


async def _send_invite(user: User) -> None:
    """Email failures are logged with the setup link so an admin can pass it on by hand."""
    try:
        await mailer.send_invite_email(user.email, user.role.value, user.invite_token)
    except Exception:
        logger.exception("[invites] Failed to send invite email to %s. Setup link: %s",
                         user.email, mailer.invite_link(user.invite_token))


class InviteService:

    async def create_invite(self, email: str, role, invited_by: str, team_id: Optional[str] = None) -> User:
        """
        Create a pending user and email them a setup link.

        Raises:
        - ValidationError: missing email/role, unknown role, team given for a non-IC role
        - ConflictError: email already registered
        - NotFoundError: inviter or team does not exist
        """
        email = User.normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        role = _parse_role(role)
        if not invited_by:
            raise ValidationError("InvitedBy is required")
        if team_id and role != Role.IC:
            raise ValidationError("Only IC users can be assigned to a team")

        context = "Error while creating invite"
        with storage_guard(context):
            if await User.filter(email=email).exists():
                raise ConflictError("User with this email already exists")
            inviter = await User.get_or_none(id=ensure_uuid(invited_by, "Inviter"))
            if inviter is None:
                raise NotFoundError("Inviter not found")
            team = None
            if team_id:
                team = await Team.get_or_none(id=ensure_uuid(team_id, "Team"))
                if team is None:
                    raise NotFoundError("Team not found")

            user = await User.create(
                email=email,
                password_hash=unusable_password_hash(),
                role=role,
                team_id=team.id if team else None,
                invite_token=generate_invite_token(),
                invite_expires=_expiry(),
                invited_by=inviter,
                is_active=False,
            )
        logger.info("[invites] Created invite for %s as %s", user.email, role.value)

        await _send_invite(user)
        return user

    async def get_invite_by_token(self, token: str) -> Optional[User]:
        """Pending user for an unexpired token, else None."""
        if not token:
            return None
        with storage_guard("Error while getting invite"):
            return await User.get_or_none(invite_token=token, invite_expires__gt=utc_now())

    async def complete_invite_signup(self, token: str, password: str, name: Optional[str] = None) -> User:
        if not token:
            raise ValidationError("Invite token is required")
        if not password:
            raise ValidationError("Password is required")

        user = await self.get_invite_by_token(token)
        if user is None:
            raise ValidationError("Invalid or expired invite token")

        user.password_hash = hash_password(password)
        if name:
            user.name = name
        user.is_active = True
        user.invite_token = None
        user.invite_expires = None
        with storage_guard("Error while completing signup"):
            await user.save()
        logger.info("[invites] Invite completed for %s", user.email)
        return user

    async def resend_invite(self, user_id: str) -> User:
        uid = ensure_uuid(user_id, "User")
        with storage_guard("Error while resending invite"):
            user = await User.get_or_none(id=uid)
            if user is None:
                raise NotFoundError("User not found")
            if user.is_active:
                raise ValidationError("User is already active")
            user.invite_token = generate_invite_token()
            user.invite_expires = _expiry()
            await user.save()
        logger.info("[invites] Invite regenerated for %s", user.email)

        await _send_invite(user)
        return user


invite_service = InviteService()
