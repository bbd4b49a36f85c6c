"""
Automation settings

Single row (id = SINGLETON_ID) holding the weekly reminder schedule.
The row is created on first read with the default schedule.
"""
import logging
from typing import Optional

from app.core.errors import ValidationError, storage_guard
from app.models.automation_settings import (
    DEFAULT_DAY_OF_WEEK,
    DEFAULT_HOUR,
    DEFAULT_MINUTE,
    DEFAULT_TIMEZONE,
    SINGLETON_ID,
    AutomationSettings,
)

logger = logging.getLogger("uvicorn.error")


def _check_range(value: Optional[int], low: int, high: int, message: str) -> None:
    if value is not None and not (low <= value <= high):
        raise ValidationError(message)


class AutomationService:

    async def get(self) -> AutomationSettings:
        with storage_guard("Database error while getting settings"):
            row, created = await AutomationSettings.get_or_create(
                id=SINGLETON_ID,
                defaults={
                    "day_of_week": DEFAULT_DAY_OF_WEEK,
                    "hour": DEFAULT_HOUR,
                    "minute": DEFAULT_MINUTE,
                    "timezone": DEFAULT_TIMEZONE,
                },
            )
        if created:
            logger.info("[settings] Created default automation settings")
        return row

    async def update(
        self,
        day_of_week: Optional[int] = None,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
        timezone: Optional[str] = None,
    ) -> AutomationSettings:
        """Validate, then change only the supplied fields."""
        _check_range(day_of_week, 0, 6, "dayOfWeek must be between 0 (Sunday) and 6 (Saturday)")
        _check_range(hour, 0, 23, "hour must be between 0 and 23")
        _check_range(minute, 0, 59, "minute must be between 0 and 59")
        if timezone is not None and not timezone.strip():
            raise ValidationError("timezone must not be empty")

        row = await self.get()
        if day_of_week is not None:
            row.day_of_week = day_of_week
        if hour is not None:
            row.hour = hour
        if minute is not None:
            row.minute = minute
        if timezone is not None:
            row.timezone = timezone.strip()
        with storage_guard("Database error while updating settings"):
            await row.save()
        logger.info("[settings] Automation schedule set to day=%s %02d:%02d %s",
                    row.day_of_week, row.hour, row.minute, row.timezone)
        return row


automation_service = AutomationService()
