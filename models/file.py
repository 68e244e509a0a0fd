"""
File model for uploaded post images.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel, utcnow


class File(BaseModel):
    """
    Represents an uploaded file and its storage key.

    A file with ``post_id`` set to ``None`` is unattached. Once attached the
    link is never cleared; the row goes away with its post or, while still
    unattached, through the periodic cleanup.
    """

    __tablename__ = "files"

    filename = Column(String(255), nullable=False, unique=True)
    upload_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    file_type = Column(String(100))
    post_id = Column(
        UUID(), ForeignKey("posts.id", ondelete="CASCADE"), nullable=True, unique=True
    )

    # Relationships
    post = relationship("Post", back_populates="file")
