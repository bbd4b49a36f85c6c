# app/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the first admin account on startup so invites can be sent.
"""
import os
import logging
from app.models.user import User, Role
from app.core.security import hash_password

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin() -> None:
    """
    If no admin exists in the database, create a default admin based on environment variables.
    Only takes effect under the following conditions:
      - Currently no user with role="admin"
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    Environment variables:
      ADMIN_EMAIL    (default: "admin@okrflow.com")
      ADMIN_NAME     (default: "Admin User")
      ADMIN_PASSWORD (required, otherwise won't create)
    """
    has_admin = await User.filter(role=Role.ADMIN).exists()
    if has_admin:
        return

    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return

    admin_email = User.normalize_email(os.getenv("ADMIN_EMAIL", "admin@okrflow.com"))
    admin_name = os.getenv("ADMIN_NAME", "Admin User")

    existing = await User.get_or_none(email=admin_email)
    if existing:
        logger.warning("[bootstrap] ADMIN_EMAIL=%s already belongs to a %s account -> skip.",
                       admin_email, existing.role.value)
        return

    u = await User.create(
        email=admin_email,
        name=admin_name,
        password_hash=hash_password(admin_password),
        role=Role.ADMIN,
        is_active=True,
    )
    logger.warning("[bootstrap] Created default admin -> email=%s id=%s", u.email, u.id)
