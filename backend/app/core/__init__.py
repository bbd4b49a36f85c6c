# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation on startup
- db: Database configuration and connection management
- errors: Service error taxonomy and ORM error wrapping
- security: Password hashing, access tokens and invite tokens
"""
