"""
Shared schemas for list endpoints.

WHY: Every paginated list answers with the same pagination block, and every
filterable endpoint accepts the same {field, value} criterion shape.
"""

import math
from typing import Any, Optional

from pydantic import BaseModel, Field


class FilterCriterion(BaseModel):
    """
    One caller filter criterion.

    WHY: Both parts are optional here; the filter builder silently skips
    criteria with an unknown field or a blank value.
    """

    field: Optional[str] = Field(None, description="Filter field name")
    value: Any = Field(None, description="Value or preset token")


class Pagination(BaseModel):
    """Pagination block of list responses."""

    total: int = Field(..., description="Total matching rows")
    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total_pages: int = Field(..., alias="totalPages", description="Number of pages")

    class Config:
        populate_by_name = True

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )
