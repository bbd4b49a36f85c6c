# app/models/user.py
"""
Database model for users.
Represents an account in the system: credentials, profile, role-based access
control, team membership (ICs only) and the pending-invite state.
"""
import uuid
from enum import Enum
from tortoise import fields, models


class Role(str, Enum):
    """Closed set of user roles."""
    ADMIN = "admin"
    MANAGER = "manager"
    IC = "ic"


# Roles allowed to manage a team
MANAGER_ROLES = (Role.MANAGER, Role.ADMIN)


class User(models.Model):
    """
    User database model.

    Relationships:
    - Belongs to at most one Team (ICs only, via `team_id`)
    - Manages zero or more Teams (via related_name="managed_teams")
    - Owns weekly Goals (via related_name="goals")

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique across all users and is stored lowercase
    - invite_token is only set while the account is pending activation
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    email = fields.CharField(max_length=256, unique=True, index=True)  # Login identifier, lowercase
    password_hash = fields.CharField(max_length=255)  # Hashed password (argon2)
    name = fields.CharField(max_length=256, null=True)  # Display name (optional)
    role = fields.CharEnumField(Role, max_length=16, default=Role.IC)
    # Team reference, only meaningful for ICs. A single column keeps an IC in at most
    # one team; it is a plain id (Team already references users through its manager)
    # and is maintained by the team service.
    team_id = fields.UUIDField(null=True, index=True)
    invite_token = fields.CharField(max_length=128, null=True, index=True)
    invite_expires = fields.DatetimeField(null=True)
    invited_by = fields.ForeignKeyField(
        "models.User",
        related_name="invitees",
        null=True,
        on_delete=fields.SET_NULL,
    )
    is_active = fields.BooleanField(default=True)  # False until an invited user completes signup
    created_at = fields.DatetimeField(auto_now_add=True)
    last_login_at = fields.DatetimeField(null=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    @staticmethod
    def normalize_email(raw: str) -> str:
        return (raw or "").strip().lower()

    @property
    def display_name(self) -> str:
        return self.name or self.email
