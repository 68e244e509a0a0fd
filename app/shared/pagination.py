"""Pagination utilities."""

from typing import Any, Dict, Generic, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql import Select

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PaginationParams(BaseModel):
    """Pagination parameters."""

    page: int = Field(default=0, ge=0, description="Page number (0-based)")
    size: int = Field(
        default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size"
    )

    @classmethod
    def from_query(cls, page: Any = None, size: Any = None) -> "PaginationParams":
        """Build parameters from raw query values, replacing invalid ones.

        A page below zero becomes 0; a size that is not a number or lies
        outside 1..100 becomes the default size.
        """
        try:
            page_number = int(page)
        except (TypeError, ValueError):
            page_number = 0
        try:
            page_size = int(size)
        except (TypeError, ValueError):
            page_size = DEFAULT_PAGE_SIZE

        if page_number < 0:
            page_number = 0
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            page_size = DEFAULT_PAGE_SIZE

        return cls(page=page_number, size=page_size)


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response."""

    data: list[T]
    page: int
    size: int
    total_pages: int


async def paginate(db: AsyncSession, query: Select, pagination: PaginationParams) -> Dict[str, Any]:
    """
    Paginate a SQLAlchemy query.

    Args:
        db: Database session
        query: SQLAlchemy select query
        pagination: Pagination parameters

    Returns:
        Dictionary with pagination info and items
    """

    # Get total count by creating a count query from the original query's subquery
    subquery = query.subquery()
    count_query = select(func.count()).select_from(subquery)
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    total_pages = (total + pagination.size - 1) // pagination.size  # Ceiling division

    offset = pagination.page * pagination.size
    paginated_query = query.offset(offset).limit(pagination.size)

    result = await db.execute(paginated_query)
    items = result.scalars().unique().all()

    return {
        "items": items,
        "total": total,
        "page": pagination.page,
        "size": pagination.size,
        "total_pages": total_pages,
    }
