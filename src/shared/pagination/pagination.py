"""Offset pagination for list endpoints."""

from typing import TypeVar

from pydantic import BaseModel, Field
from sqlalchemy import Select

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000

T = TypeVar("T")


class PaginationParams(BaseModel):
    """Page/page_size query parameters.

    Use as ``pagination: PaginationParams = Depends()``. Leaving either value
    unset (None) returns every row.
    """

    page: int | None = Field(default=1, ge=1, description="Page number, 1-indexed")
    page_size: int | None = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Rows per page")

    @property
    def is_paginated(self) -> bool:
        return self.page is not None and self.page_size is not None

    @property
    def offset(self) -> int:
        if not self.is_paginated:
            return 0
        return (self.page - 1) * self.page_size

    def apply(self, stmt: Select[T]) -> Select[T]:
        """Add OFFSET/LIMIT to a select when pagination is enabled."""
        if not self.is_paginated:
            return stmt
        return stmt.offset(self.offset).limit(self.page_size)


__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "PaginationParams"]
