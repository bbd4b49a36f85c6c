"""
Services Module

Business logic behind the REST API, plus the external collaborators:
- Goals: weekly goal aggregate with comment threads and notifications
- Chat: goal Q&A through an LLM chat provider (Anthropic / OpenAI)
- Teams, users, invites, automation settings
- Notifier: transactional email (Postmark)
"""

from .goals import goal_service
from .chat import chat_service
from .teams import team_service
from .users import user_service
from .invites import invite_service
from .automation import automation_service

# External providers
from .llm import get_completer, send_llm_request
from .notifier import get_notifier, set_notifier

__all__ = [
    "goal_service",
    "chat_service",
    "team_service",
    "user_service",
    "invite_service",
    "automation_service",
    "get_completer",
    "send_llm_request",
    "get_notifier",
    "set_notifier",
]
