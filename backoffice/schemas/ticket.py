"""
Pydantic schemas for ticket endpoints.

WHAT: Request/response schemas for the ticket API.

WHY: Schemas define API contracts for ticket operations:
1. Validate incoming request data
2. Document API for OpenAPI/Swagger
3. Control which fields are exposed

HOW: Uses Pydantic v2 with Field constraints and ORM mode for SQLAlchemy
integration. Titles and comment bodies are checked for blankness by the
service as well, so the error is the same whether the request came through
the API or not.
"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from backoffice.schemas.catalog import StatusResponse, PriorityResponse, CategoryResponse
from backoffice.schemas.common import Pagination


# ============================================================================
# User Reference Schema
# ============================================================================


class UserReference(BaseModel):
    """
    Minimal user info for ticket references.

    WHY: Avoids exposing full user details while providing
    necessary info for display (name, email).
    """

    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    full_name: str = Field(..., description="Display name")

    class Config:
        from_attributes = True


# ============================================================================
# Requests
# ============================================================================


class TicketCreate(BaseModel):
    """
    Ticket creation request.

    WHY: contractor_id is only needed by platform users who do not belong
    to a contractor themselves.
    """

    title: str = Field(..., max_length=255, description="Ticket title")
    description: Optional[str] = Field(None, max_length=50000)
    category_id: Optional[int] = Field(None, gt=0)
    priority_id: Optional[int] = Field(None, gt=0)
    assigned_to: Optional[int] = Field(None, gt=0, description="Assignee user ID")
    due_date: Optional[date] = None
    contractor_id: Optional[int] = Field(None, gt=0)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Leaky pipe",
                "description": "Water under the sink in room 12",
                "priority_id": 3,
            }
        }


class TicketStatusChange(BaseModel):
    """Status change request with an optional accompanying comment."""

    status_id: int = Field(..., gt=0, description="Target status ID")
    comment: Optional[str] = Field(None, max_length=50000)


class CommentCreate(BaseModel):
    comment: str = Field(..., max_length=50000, description="Comment text")
    is_internal: bool = Field(
        default=False,
        description="True for internal notes (hidden from external assignees)",
    )


# ============================================================================
# Responses
# ============================================================================


class CommentResponse(BaseModel):
    id: int
    ticket_id: int
    user_id: int
    comment: str
    is_internal: bool
    created_at: datetime
    author_name: Optional[str] = Field(None, description="Author display name")


class AttachmentResponse(BaseModel):
    id: int
    ticket_id: int
    uploaded_by: Optional[int] = None
    file_name: str
    file_path: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class HistoryResponse(BaseModel):
    id: int
    ticket_id: int
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    action: str
    field_name: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime


class TicketResponse(BaseModel):
    """
    Ticket response schema.

    WHY: Foreign keys are returned alongside the embedded catalog rows so
    clients can both display and re-submit them.
    """

    id: int
    ticket_number: str = Field(..., description="Human-readable number, e.g. #12")
    contractor_id: int
    title: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    priority_id: Optional[int] = None
    status_id: int
    created_by: int
    assigned_to: Optional[int] = None
    due_date: Optional[date] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    status: Optional[StatusResponse] = None
    priority: Optional[PriorityResponse] = None
    category: Optional[CategoryResponse] = None
    creator: Optional[UserReference] = None
    assignee: Optional[UserReference] = None

    class Config:
        from_attributes = True


class TicketDetailResponse(TicketResponse):
    """Ticket with its thread, attachments and recent history."""

    comments: List[CommentResponse] = Field(default_factory=list)
    attachments: List[AttachmentResponse] = Field(default_factory=list)
    history: List[HistoryResponse] = Field(default_factory=list)


class TicketListResponse(BaseModel):
    tickets: List[TicketResponse]
    pagination: Pagination
