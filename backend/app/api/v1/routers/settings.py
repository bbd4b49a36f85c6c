# app/api/v1/routers/settings.py
import logging

from fastapi import APIRouter, Depends

from app.api.v1.deps import require_admin
from app.api.v1.serializers import settings_to_dict
from app.models.user import User
from app.schemas.settings import AutomationSettingsIn
from app.services.automation import automation_service

router = APIRouter(prefix="/settings", tags=["settings"])
logger = logging.getLogger("uvicorn.error")


@router.get("/automation", dependencies=[Depends(require_admin)])
async def get_automation_settings():
    """Get the weekly reminder schedule (admin only)."""
    row = await automation_service.get()
    return {"settings": settings_to_dict(row)}


@router.put("/automation")
async def update_automation_settings(body: AutomationSettingsIn, admin: User = Depends(require_admin)):
    """
    Update the weekly reminder schedule (admin only).

    Only fields present in the body are changed.

    Raises:
        ValidationError (400): dayOfWeek, hour or minute out of range, or empty timezone
    """
    logger.info("[settings] Admin %s updating automation settings", admin.email)
    row = await automation_service.update(
        day_of_week=body.dayOfWeek,
        hour=body.hour,
        minute=body.minute,
        timezone=body.timezone,
    )
    return {
        "success": True,
        "message": "Automation settings updated successfully",
        "settings": settings_to_dict(row),
    }
