"""Pagination bounds and the paginated response envelope."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from crm.core.exceptions import InputValidationError

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PaginationMeta(BaseModel):
    """Serialized with camelCase keys (totalPages, hasNext, hasPrev)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_counts(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        if page < 1:
            raise InputValidationError("page must be at least 1")
        if limit < 1:
            raise InputValidationError("limit must be at least 1")
        if limit > MAX_LIMIT:
            raise InputValidationError(f"limit cannot exceed {MAX_LIMIT}")
        total_pages = math.ceil(total / limit)
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Page(BaseModel, Generic[T]):
    data: list[T]
    pagination: PaginationMeta
