# app/schemas/team.py
"""
Pydantic schemas for team management endpoints.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

class TeamCreateIn(BaseModel):
    name: str = Field(min_length=1)
    managerId: str = Field(min_length=1)  # User with role manager or admin
    icIds: List[str] = Field(default_factory=list)  # Users with role ic

class TeamUpdateIn(BaseModel):
    """
    Request model for updating a team.
    All fields are optional; icIds, when present, replaces the member list.
    """
    name: Optional[str] = None
    managerId: Optional[str] = None
    icIds: Optional[List[str]] = None
