"""
Models package initialization.
"""

from .base import Base, BaseModel
from .comment import Comment
from .file import File
from .like import Like
from .post import Post
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Post",
    "File",
    "Comment",
    "Like",
]
