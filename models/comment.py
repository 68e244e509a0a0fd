"""
Comment model for post discussions.
"""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Comment(BaseModel):
    __tablename__ = "comments"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(UUID(), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(String(1000), nullable=False)

    # Relationships
    user = relationship("User", back_populates="comments")
    post = relationship("Post", back_populates="comments")
