"""
Post model for user publications.
"""

from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Post(BaseModel):
    """
    Represents a post published by a user.

    A post owns at most one file (through ``files.post_id``), and any number of
    comments and likes. Deleting a post removes all of them through the
    cascading foreign keys.
    """

    __tablename__ = "posts"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(String(1000))
    is_public = Column(Boolean, nullable=False, default=True)

    # Relationships
    user = relationship("User", back_populates="posts")
    file = relationship(
        "File",
        back_populates="post",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)
    likes = relationship("Like", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)
