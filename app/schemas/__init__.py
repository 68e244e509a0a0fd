# ruff: noqa: F403, F401
"""Schemas package initialization."""

from .base import *
from .comment import *
from .file import *
from .post import *
from .user import *
