# app/schemas/goal.py
"""
Pydantic schemas for the weekly goal endpoints.
Field names follow the camelCase JSON sent by the web client.
"""
import datetime as dt

from pydantic import BaseModel, Field, model_validator

from app.models.user import Role

WEEK_LENGTH = dt.timedelta(days=6)
HALF_DAY = dt.timedelta(hours=12)


def _to_instant(value) -> dt.datetime:
    """Plain dates are midnight UTC; naive timestamps are read as UTC."""
    if isinstance(value, dt.datetime):
        instant = value
    elif isinstance(value, dt.date):
        instant = dt.datetime.combine(value, dt.time())
    elif isinstance(value, str) and "T" in value:
        instant = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        instant = dt.datetime.combine(dt.date.fromisoformat(str(value).strip()), dt.time())
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=dt.timezone.utc)
    return instant.astimezone(dt.timezone.utc)


class SaveGoalsIn(BaseModel):
    """
    Request model for creating or updating the goals of one week.

    The client may send "YYYY-MM-DD" dates or the instants bounding its local
    week (Monday 00:00 to Sunday 23:59:59.999, serialized in UTC). The span
    must cover six days and stay under seven. weekStart becomes the calendar
    day of the nearest midnight, so local Mondays survive offsets up to 12
    hours either way; weekEnd is always weekStart + 6 days.
    """
    userId: str = Field(min_length=1)  # Must be the caller
    weekStart: dt.date
    weekEnd: dt.date
    goalsContent: str = Field(min_length=1)  # Rich text (HTML)

    @model_validator(mode="before")
    @classmethod
    def _normalize_week(cls, data):
        if not isinstance(data, dict) or data.get("weekStart") is None or data.get("weekEnd") is None:
            return data
        start = _to_instant(data["weekStart"])
        end = _to_instant(data["weekEnd"])
        if not (WEEK_LENGTH <= end - start < WEEK_LENGTH + dt.timedelta(days=1)):
            raise ValueError("weekEnd must be 6 days after weekStart")
        week_start = (start + HALF_DAY).date()
        return {**data, "weekStart": week_start, "weekEnd": week_start + WEEK_LENGTH}

class SubmitResultsIn(BaseModel):
    resultsContent: str = Field(min_length=1)

class CommentIn(BaseModel):
    """
    Request model for a new comment on a highlighted span of the goals text.
    """
    userId: str = Field(min_length=1)  # Must be the caller
    userName: str = Field(min_length=1)
    userRole: Role
    text: str = Field(min_length=1)
    highlightedText: str = Field(min_length=1)
    position: int = Field(ge=0)  # Character offset of the highlight

class ReplyIn(BaseModel):
    userId: str = Field(min_length=1)  # Must be the caller
    userName: str = Field(min_length=1)
    text: str = Field(min_length=1)
