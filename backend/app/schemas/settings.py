# app/schemas/settings.py
"""
Pydantic schemas for the automation settings endpoint.
Ranges are checked by the settings service so the error text stays in one place.
"""
from typing import Optional

from pydantic import BaseModel

class AutomationSettingsIn(BaseModel):
    """
    Request model for updating the reminder schedule.
    Only provided fields are changed.
    """
    dayOfWeek: Optional[int] = None  # 0 = Sunday ... 6 = Saturday
    hour: Optional[int] = None  # 0-23
    minute: Optional[int] = None  # 0-59
    timezone: Optional[str] = None  # IANA name, e.g. "UTC"
