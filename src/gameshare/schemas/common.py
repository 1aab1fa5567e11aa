"""Common schemas used across the API."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Pagination query parameters."""

    offset: int = Field(default=0, ge=0, description="Number of items to skip")
    limit: int = Field(default=20, ge=1, le=100, description="Number of items to return")


class SearchTarget(str, Enum):
    """Fields a keyword search is matched against."""

    TITLE = "TITLE"
    NICKNAME = "NICKNAME"
    ALL = "ALL"


class SortOrder(str, Enum):
    """Catalog ordering."""

    RECENT = "RECENT"
    POPULAR = "POPULAR"


class Period(str, Enum):
    """Creation-time window for catalog listings."""

    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    ALL = "ALL"


class PageCondition(PaginationParams):
    """Search, ordering and window parameters for game listings."""

    keyword: str | None = Field(default=None, max_length=100, description="Search keyword")
    search: SearchTarget = Field(default=SearchTarget.ALL, description="Fields to search")
    order: SortOrder = Field(default=SortOrder.RECENT, description="Result ordering")
    period: Period = Field(default=Period.ALL, description="Only games created within this window")


T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated response wrapper."""

    items: list[T]
    total: int
    offset: int
    limit: int

    @property
    def has_more(self) -> bool:
        """Check if there are more items."""
        return self.offset + len(self.items) < self.total


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None


class SuccessResponse(BaseModel):
    """Standard success response."""

    message: str
