# app/models/goal.py
"""
Database model for weekly goals.

A Goal is the aggregate root of one IC's week: the goals they set, the
results they later submit, and the comment threads managers and the IC
leave on the goals text. Comments (and their replies) are embedded in the
goal row as a JSON document, so every change to a thread is a write of the
whole goal.
"""
import datetime as dt
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field
from tortoise import fields, models

from app.models.user import Role


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def new_embedded_id() -> str:
    return uuid.uuid4().hex


class Reply(BaseModel):
    """Reply inside a comment thread. Immutable once created."""
    id: str = Field(default_factory=new_embedded_id)
    userId: str
    userName: str
    text: str
    createdAt: dt.datetime = Field(default_factory=utc_now)


class Comment(BaseModel):
    """
    Comment anchored to a highlighted span of the goals content.
    Comments are never deleted, only marked resolved.
    """
    id: str = Field(default_factory=new_embedded_id)
    userId: str
    userName: str
    userRole: Role
    text: str
    highlightedText: str
    position: int = Field(ge=0)  # Character offset inside goals_content
    replies: List[Reply] = Field(default_factory=list)
    resolved: bool = False
    createdAt: dt.datetime = Field(default_factory=utc_now)
    updatedAt: dt.datetime = Field(default_factory=utc_now)


class Goal(models.Model):
    """
    Weekly goal database model.

    Invariants:
    - At most one Goal per (user, week_start), enforced by a unique index
    - week_end is week_start + 6 days (validated when saving through the API)
    - `version` increases on every aggregate write and guards against lost updates
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="goals", on_delete=fields.CASCADE)
    week_start = fields.DateField(index=True)
    week_end = fields.DateField()
    goals_content = fields.TextField()  # Rich text (HTML) from the editor
    results_content = fields.TextField(default="")  # Empty until results are submitted
    comments = fields.JSONField(default=list)  # List[Comment] serialized as JSON
    goals_submitted_at = fields.DatetimeField(null=True)
    results_submitted_at = fields.DatetimeField(null=True)
    version = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "goals"
        unique_together = (("user", "week_start"),)

    def get_comments(self) -> List[Comment]:
        return [Comment.model_validate(c) for c in (self.comments or [])]

    def find_comment(self, comments: List[Comment], comment_id: str) -> Optional[Comment]:
        for c in comments:
            if c.id == comment_id:
                return c
        return None

    @staticmethod
    def dump_comments(comments: List[Comment]) -> list:
        return [c.model_dump(mode="json") for c in comments]
