# app/schemas/__init__.py
"""
Schema module initialization.
Exports all request schema classes from submodules for convenient imports.
"""
from .auth import *
from .chat import *
from .goal import *
from .settings import *
from .team import *
from .user import *
