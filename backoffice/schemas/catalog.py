"""
Pydantic schemas for the ticket catalogs.

WHAT: Status, priority and category shapes, used both by the catalog
endpoints and embedded in ticket responses.
"""

from typing import Optional

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    id: int = Field(..., description="Status ID")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="Stable identifier")
    description: Optional[str] = None
    color: Optional[str] = None
    is_final: bool = Field(..., description="True for terminal statuses")
    order_index: int = Field(0, description="Display order")

    class Config:
        from_attributes = True


class PriorityResponse(BaseModel):
    id: int
    name: str
    slug: str
    level: int = Field(..., description="Higher is more urgent")
    color: Optional[str] = None

    class Config:
        from_attributes = True


class CategoryResponse(BaseModel):
    id: int
    contractor_id: Optional[int] = Field(None, description="Owner, null when shared")
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None

    class Config:
        from_attributes = True
