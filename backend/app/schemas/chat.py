# app/schemas/chat.py
"""
Pydantic schemas for the goal chat endpoints.
"""
from pydantic import BaseModel, Field

class ChatMessageIn(BaseModel):
    """
    Request model for asking a question about one week's goals and results.
    """
    goalId: str = Field(min_length=1)
    userId: str = Field(min_length=1)  # Must be the caller
    message: str = Field(min_length=1)  # The question
