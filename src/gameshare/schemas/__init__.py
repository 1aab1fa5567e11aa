"""Pydantic schemas for API requests/responses."""

from gameshare.schemas.common import (
    ErrorResponse,
    PageCondition,
    PaginatedResponse,
    PaginationParams,
    Period,
    SearchTarget,
    SortOrder,
    SuccessResponse,
)

__all__ = [
    "ErrorResponse",
    "PageCondition",
    "PaginatedResponse",
    "PaginationParams",
    "Period",
    "SearchTarget",
    "SortOrder",
    "SuccessResponse",
]
