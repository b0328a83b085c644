"""
Pydantic schemas for accommodation endpoints.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel

from backoffice.schemas.common import Pagination


class AccommodationResponse(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    type: str
    status: str
    capacity: int
    current_contractor_id: Optional[int] = None
    monthly_rent: Optional[Decimal] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccommodationListResponse(BaseModel):
    accommodations: List[AccommodationResponse]
    pagination: Pagination
