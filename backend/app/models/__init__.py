# app/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User / Role: Accounts, role-based access control and invite state
- Team: A manager's team of ICs
- Goal / Comment / Reply: Weekly goal aggregate with embedded comment threads
- ChatMessage / ChatRole: Goal Q&A chat log
- AutomationSettings: Singleton reminder schedule
"""
from .user import User, Role, MANAGER_ROLES
from .team import Team
from .goal import Goal, Comment, Reply
from .chat_message import ChatMessage, ChatRole
from .automation_settings import AutomationSettings
