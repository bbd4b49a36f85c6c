# app/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for login, self-registration and invite signup.
"""
from typing import Optional

from pydantic import BaseModel, Field

class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    Contains credentials for authentication.
    """
    email: str = Field(min_length=1)  # Login email (matched case-insensitively)
    password: str = Field(min_length=1)  # Plain text password, verified against the stored hash

class RegisterIn(BaseModel):
    """
    Request model for self-registration.
    Registered accounts are always active ICs.
    """
    email: str = Field(min_length=1)
    password: str = Field(min_length=6)
    name: Optional[str] = None  # Display name (optional)

class InviteSignupIn(BaseModel):
    """
    Request model for completing an invite.
    The token comes from the setup link in the invite email.
    """
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)
    name: Optional[str] = None
