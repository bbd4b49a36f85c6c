# app/schemas/user.py
"""
Pydantic schemas for user management endpoints.
"""
from typing import Optional

from pydantic import BaseModel, Field

class InviteIn(BaseModel):
    """
    Request model for inviting a user.
    teamId is only accepted for the ic role.
    """
    email: str = Field(min_length=1)
    role: str = Field(min_length=1)  # admin | manager | ic
    teamId: Optional[str] = None
