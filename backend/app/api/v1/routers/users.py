# app/api/v1/routers/users.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.deps import get_current_user, require_admin
from app.api.v1.serializers import user_to_dict
from app.models.user import MANAGER_ROLES, User
from app.schemas.user import InviteIn
from app.services.invites import invite_service
from app.services.users import user_service

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger("uvicorn.error")


@router.get("", dependencies=[Depends(require_admin)])
async def list_users():
    """Get all users, newest first (admin only)."""
    users = await user_service.list()
    return {"users": [user_to_dict(u) for u in users]}


@router.get("/{user_id}")
async def get_user(user_id: str, current: User = Depends(get_current_user)):
    """
    Get one user.

    Admins and managers may read any user; ICs only themselves.

    Raises:
        NotFoundError (404): User not found
        HTTPException (403): IC reading another user
    """
    user = await user_service.get(user_id)
    if current.role not in MANAGER_ROLES and str(current.id) != str(user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return {"user": user_to_dict(user)}


@router.post("/invite")
async def invite_user(body: InviteIn, admin: User = Depends(require_admin)):
    """
    Invite a user by email (admin only).

    Creates an inactive account and emails a setup link valid for 7 days.
    The invite succeeds even when the email cannot be delivered.

    Raises:
        ValidationError (400): Unknown role, or teamId given for a non-IC role
        ConflictError (409): Email already registered
        NotFoundError (404): Team not found
    """
    logger.info("[invites] Admin %s inviting %s as %s", admin.email, body.email, body.role)
    user = await invite_service.create_invite(body.email, body.role, str(admin.id), body.teamId)
    return {"success": True, "message": "User invited successfully", "user": user_to_dict(user)}


@router.post("/{user_id}/resend-invite")
async def resend_invite(user_id: str, admin: User = Depends(require_admin)):
    logger.info("[invites] Admin %s resending invite to %s", admin.email, user_id)
    await invite_service.resend_invite(user_id)
    return {"success": True, "message": "Invite resent successfully"}
