"""
Like model linking a user to a post.
"""

from sqlalchemy import Column, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import UUID, Base, utcnow


class Like(Base):
    """
    Represents a like given by a user to a post.

    The pair (user_id, post_id) is the primary key, so a user can like a post
    only once.
    """

    __tablename__ = "likes"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(UUID(), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="likes")
    post = relationship("Post", back_populates="likes")
