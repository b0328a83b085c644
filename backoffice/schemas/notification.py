"""
Pydantic schemas for bulk notification endpoints.

WHAT: Template listing, recipient targeting and bulk send contracts.

WHY: The recipient shape carries exactly the values the templates can
interpolate, so the UI can preview a message before sending.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from backoffice.schemas.common import FilterCriterion, Pagination
from backoffice.schemas.employee import EmployeeStatusResponse, AccommodationReference


class NotificationTemplateResponse(BaseModel):
    id: int
    slug: str
    name: str
    subject: str
    body_html: str
    event_type: Optional[str] = None
    language: str
    is_active: bool

    class Config:
        from_attributes = True


class FilterRecipientsRequest(BaseModel):
    filters: List[FilterCriterion] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "filters": [
                    {"field": "visa_expiry", "value": "30days"},
                    {"field": "workplace", "value": "Site A"},
                ]
            }
        }


class RecipientResponse(BaseModel):
    id: int
    name: str
    email: str
    workplace: Optional[str] = None
    accommodation: Optional[str] = None
    visa_expiry: Optional[date] = None
    contract_end: Optional[date] = None


class RecipientListResponse(BaseModel):
    recipients: List[RecipientResponse]
    total: int


class FilterOptionsResponse(BaseModel):
    statuses: List[EmployeeStatusResponse]
    workplaces: List[str]
    accommodations: List[AccommodationReference]
    positions: List[str]
    countries: List[str]


class SendBulkRequest(BaseModel):
    """
    Bulk send request.

    WHY: Either a stored template (template_slug) or a direct subject/body
    must resolve; the service rejects the request otherwise.
    """

    recipient_ids: List[int] = Field(default_factory=list)
    template_slug: Optional[str] = None
    subject: Optional[str] = Field(None, max_length=500)
    body: Optional[str] = None
    variables: Dict[str, Any] = Field(default_factory=dict)


class SendError(BaseModel):
    email: str
    error: Optional[str] = None


class SendBulkResponse(BaseModel):
    sent: int
    failed: int
    errors: List[SendError]


class EmailLogResponse(BaseModel):
    id: int
    to_email: str
    subject: str
    status: str
    error_message: Optional[str] = None
    sent_at: datetime

    class Config:
        from_attributes = True


class EmailLogListResponse(BaseModel):
    logs: List[EmailLogResponse]
    pagination: Pagination
