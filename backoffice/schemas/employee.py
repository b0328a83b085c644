"""
Pydantic schemas for employee endpoints.
"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from backoffice.schemas.common import Pagination


class EmployeeStatusResponse(BaseModel):
    id: int
    name: str
    slug: str
    color: Optional[str] = None

    class Config:
        from_attributes = True


class AccommodationReference(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class EmployeeResponse(BaseModel):
    """
    Employee response schema.

    WHY: email is the resolved address (company mailbox, else login email),
    the one notifications would go to.
    """

    id: int
    contractor_id: int
    user_id: Optional[int] = None
    employee_number: Optional[str] = None
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
    company_email: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    birth_date: Optional[date] = None
    permanent_address_country: Optional[str] = None
    position: Optional[str] = None
    workplace: Optional[str] = None
    visa_expiry: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status_id: Optional[int] = None
    accommodation_id: Optional[int] = None
    status: Optional[EmployeeStatusResponse] = None
    accommodation: Optional[AccommodationReference] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeListResponse(BaseModel):
    employees: List[EmployeeResponse]
    pagination: Pagination = Field(..., description="Pagination block")
