"""
Ticket management API endpoints.

WHAT: RESTful API for the ticket lifecycle.

WHY: Tickets are how contractors report facility and workforce problems:
1. Contractor-scoped listing with catalog filters and presets
2. Status changes by administrators or the assignee
3. Comment threading with internal notes
4. Append-only history on the detail view

HOW: FastAPI router delegating to TicketLifecycleService. The caller's
IdentityContext is resolved once by get_identity and passed explicitly;
every role decision happens in AuthorizationGuard.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.deps import get_identity
from backoffice.core.identity import IdentityContext
from backoffice.db.session import get_db
from backoffice.filters import parse_filters_param
from backoffice.models.ticket import TicketComment, TicketHistory
from backoffice.schemas.common import Pagination
from backoffice.schemas.ticket import (
    TicketCreate,
    TicketStatusChange,
    TicketResponse,
    TicketDetailResponse,
    TicketListResponse,
    CommentCreate,
    CommentResponse,
    AttachmentResponse,
    HistoryResponse,
)
from backoffice.services.ticket_lifecycle import TicketLifecycleService, TicketDetail


router = APIRouter(prefix="/tickets", tags=["tickets"])


def _comment_to_response(comment: TicketComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        ticket_id=comment.ticket_id,
        user_id=comment.user_id,
        comment=comment.comment,
        is_internal=comment.is_internal,
        created_at=comment.created_at,
        author_name=comment.author.full_name if comment.author else None,
    )


def _history_to_response(entry: TicketHistory) -> HistoryResponse:
    return HistoryResponse(
        id=entry.id,
        ticket_id=entry.ticket_id,
        user_id=entry.user_id,
        user_name=entry.user.full_name if entry.user else None,
        action=entry.action,
        field_name=entry.field_name,
        old_value=entry.old_value,
        new_value=entry.new_value,
        created_at=entry.created_at,
    )


def _ticket_to_detail_response(detail: TicketDetail) -> TicketDetailResponse:
    """
    Convert a TicketDetail to the detail response.

    WHY: The comment list was already filtered for internal notes by the
    service according to the caller's role.
    """
    base = TicketResponse.model_validate(detail.ticket)
    return TicketDetailResponse(
        **base.model_dump(),
        comments=[_comment_to_response(c) for c in detail.comments],
        attachments=[AttachmentResponse.model_validate(a) for a in detail.attachments],
        history=[_history_to_response(h) for h in detail.history],
    )


# ============================================================================
# Ticket Endpoints
# ============================================================================


@router.get(
    "",
    response_model=TicketListResponse,
    status_code=status.HTTP_200_OK,
    summary="List tickets",
    description="Paginated tickets visible to the caller, newest first",
)
async def list_tickets(
    status_filter: Optional[str] = Query(None, alias="status", description="Status slug"),
    category: Optional[str] = Query(None, description="Category slug"),
    priority: Optional[str] = Query(None, description="Priority slug"),
    assigned_to: Optional[int] = Query(None, description="Assignee user ID"),
    search: Optional[str] = Query(None, description="Search title, description, number"),
    urgent: bool = Query(False, description="Only urgent and critical priorities"),
    filters: Optional[str] = Query(None, description="JSON array of {field, value}"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> TicketListResponse:
    """
    List tickets with filters.

    WHY: The caller's scope is always applied first; status, category,
    priority, assigned_to, search, urgent and the filters array narrow it.

    Raises:
        FilterCriteriaError (400): More than FILTER_MAX_CRITERIA criteria
    """
    service = TicketLifecycleService(db)
    tickets, total = await service.list_tickets(
        identity,
        page=page,
        limit=limit,
        status=status_filter,
        category=category,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
        urgent=urgent,
        criteria=parse_filters_param(filters),
    )

    return TicketListResponse(
        tickets=[TicketResponse.model_validate(t) for t in tickets],
        pagination=Pagination.build(total, page, limit),
    )


@router.get(
    "/{ticket_id}",
    response_model=TicketDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get ticket",
    description="Ticket with comments, attachments and recent history",
)
async def get_ticket(
    ticket_id: int,
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> TicketDetailResponse:
    """
    Get ticket details.

    Raises:
        TicketNotFoundError (404): If the ticket does not exist
        TicketAccessDenied (403): If it is outside the caller's scope
    """
    detail = await TicketLifecycleService(db).get_ticket(identity, ticket_id)
    return _ticket_to_detail_response(detail)


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create ticket",
    description="Open a ticket in status 'new'",
)
async def create_ticket(
    data: TicketCreate,
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """
    Create a new ticket.

    Raises:
        ValidationError (400): Blank title or unknown reference
        AuthorizationError (403): Creating for another contractor
    """
    ticket = await TicketLifecycleService(db).create_ticket(
        identity,
        title=data.title,
        description=data.description,
        category_id=data.category_id,
        priority_id=data.priority_id,
        assigned_to=data.assigned_to,
        due_date=data.due_date,
        contractor_id=data.contractor_id,
    )
    return TicketResponse.model_validate(ticket)


@router.patch(
    "/{ticket_id}/status",
    response_model=TicketResponse,
    status_code=status.HTTP_200_OK,
    summary="Change ticket status",
    description="Move a ticket to another status (administrators or the assignee)",
)
async def change_ticket_status(
    ticket_id: int,
    data: TicketStatusChange,
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> TicketResponse:
    """
    Change ticket status.

    WHY: Terminal statuses close the ticket (completed also resolves it);
    any non-terminal status reopens it.

    Raises:
        TicketNotFoundError (404): If ticket not found
        TicketAccessDenied / TicketTransitionDenied (403): Not permitted
        ValidationError (400): Unknown status
        InvalidStateTransitionError (422): Ticket already in that status
    """
    ticket = await TicketLifecycleService(db).transition_status(
        identity,
        ticket_id,
        status_id=data.status_id,
        comment=data.comment,
    )
    return TicketResponse.model_validate(ticket)


# ============================================================================
# Comment Endpoints
# ============================================================================


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add comment",
    description="Append a comment to a ticket",
)
async def add_comment(
    ticket_id: int,
    data: CommentCreate,
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> CommentResponse:
    """
    Add a comment.

    Raises:
        ValidationError (400): Blank comment
        TicketNotFoundError (404): If ticket not found
        TicketAccessDenied (403): Outside the caller's contractor
    """
    comment = await TicketLifecycleService(db).add_comment(
        identity,
        ticket_id,
        body=data.comment,
        is_internal=data.is_internal,
    )
    return _comment_to_response(comment)
