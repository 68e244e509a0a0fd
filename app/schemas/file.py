"""File-related Pydantic schemas."""

from uuid import UUID

from .base import BaseSchema


class FileResponse(BaseSchema):
    """Stored upload as returned to clients."""

    id: UUID
    filename: str
    file_type: str
