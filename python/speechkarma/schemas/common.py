"""Shared schema pieces: pagination envelope and sort order."""

from math import ceil
from typing import Literal

from pydantic import BaseModel, Field

SortOrder = Literal["asc", "desc"]

MAX_PAGE_LIMIT = 100
DEFAULT_PAGE_LIMIT = 50


class PageQuery(BaseModel):
    """Page-based pagination parameters.

    Out-of-range values are rejected, never clamped.
    """

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationOut(BaseModel):
    """Pagination metadata returned next to ``data``."""

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationOut":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit))
