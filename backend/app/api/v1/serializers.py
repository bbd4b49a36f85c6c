# app/api/v1/serializers.py
"""
Convert models to the camelCase dictionaries returned by the API.
Secrets (password hashes, invite tokens) never leave this module.
"""
import datetime as dt
from typing import Optional

from app.models.automation_settings import AutomationSettings
from app.models.chat_message import ChatMessage, ChatRole
from app.models.goal import Comment, Goal, Reply
from app.models.team import Team
from app.models.user import Role, User


def _iso(value: Optional[dt.date]) -> Optional[str]:
    return value.isoformat() if value else None


def user_to_dict(u: User) -> dict:
    return {
        "id": str(u.id),
        "email": u.email,
        "name": u.name,
        "role": Role(u.role).value,
        "teamId": str(u.team_id) if u.team_id else None,
        "invitedBy": str(u.invited_by_id) if u.invited_by_id else None,
        "inviteExpires": _iso(u.invite_expires),
        "isActive": u.is_active,
        "createdAt": _iso(u.created_at),
        "lastLoginAt": _iso(u.last_login_at),
    }


def user_summary(u: Optional[User]) -> Optional[dict]:
    """Short form used inside teams."""
    if u is None:
        return None
    return {"id": str(u.id), "email": u.email, "name": u.name, "role": Role(u.role).value}


def goal_to_dict(g: Goal) -> dict:
    return {
        "id": str(g.id),
        "userId": str(g.user_id),
        "weekStart": _iso(g.week_start),
        "weekEnd": _iso(g.week_end),
        "goalsContent": g.goals_content,
        "resultsContent": g.results_content,
        "comments": Goal.dump_comments(g.get_comments()),
        "goalsSubmittedAt": _iso(g.goals_submitted_at),
        "resultsSubmittedAt": _iso(g.results_submitted_at),
        "version": g.version,
        "createdAt": _iso(g.created_at),
        "updatedAt": _iso(g.updated_at),
    }


def comment_to_dict(c: Comment) -> dict:
    return c.model_dump(mode="json")


def reply_to_dict(r: Reply) -> dict:
    return r.model_dump(mode="json")


def chat_message_to_dict(m: ChatMessage) -> dict:
    return {
        "id": m.id,
        "goalId": str(m.goal_id),
        "userId": str(m.user_id),
        "role": ChatRole(m.role).value,
        "content": m.content,
        "createdAt": _iso(m.created_at),
    }


def team_to_dict(t: Team) -> dict:
    """Expects a team hydrated by the team service (manager and members loaded)."""
    members = getattr(t, "members", [])
    return {
        "id": str(t.id),
        "name": t.name,
        "managerId": str(t.manager_id),
        "manager": user_summary(t.manager),
        "icIds": [str(m.id) for m in members],
        "members": [user_summary(m) for m in members],
        "createdAt": _iso(t.created_at),
        "updatedAt": _iso(t.updated_at),
    }


def settings_to_dict(s: AutomationSettings) -> dict:
    return {
        "id": s.id,
        "dayOfWeek": s.day_of_week,
        "hour": s.hour,
        "minute": s.minute,
        "timezone": s.timezone,
        "createdAt": _iso(s.created_at),
        "updatedAt": _iso(s.updated_at),
    }
