"""
Ticket Data Access Objects.

WHAT: DAOs for tickets, their comment thread, history and attachments.

WHY: Encapsulates all ticket database operations with:
1. Mandatory read scope on every list query
2. Slug filters over the status, priority and category catalogs
3. Sequence number allocation ("#N")
4. Append-only comment and history tables

HOW: Uses SQLAlchemy 2.0 async with proper session management. Filter
criteria are compiled by FilterExpressionBuilder against TICKET_FILTER_FIELDS.
"""

from datetime import date, datetime
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import select, func, cast, or_, Integer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.core.exceptions import AuditLogImmutableError
from backoffice.dao.base import BaseDAO
from backoffice.filters import FilterExpressionBuilder, CalendarWindowPreset
from backoffice.models.base import utcnow
from backoffice.models.ticket import (
    Ticket,
    TicketStatus,
    Priority,
    TicketCategory,
    TicketComment,
    TicketAttachment,
    TicketHistory,
    URGENT_PRIORITY_LEVEL,
)
from backoffice.services.authorization import ReadScope


# Criterion field -> column or preset accepted by GET /tickets?filters=
TICKET_FILTER_FIELDS = {
    "status": TicketStatus.slug,
    "category": TicketCategory.slug,
    "priority": Priority.slug,
    "contractor": Ticket.contractor_id,
    "date_range": CalendarWindowPreset(Ticket.created_at),
}

# Dedicated query parameters share the builder with caller criteria
_QUERY_PARAM_FIELDS = {
    "status": TicketStatus.slug,
    "category": TicketCategory.slug,
    "priority": Priority.slug,
    "assigned_to": Ticket.assigned_to,
}

_TICKET_LOAD_OPTIONS = (
    selectinload(Ticket.status),
    selectinload(Ticket.priority),
    selectinload(Ticket.category),
    selectinload(Ticket.creator),
    selectinload(Ticket.assignee),
)


class TicketDAO(BaseDAO[Ticket]):
    """
    Data Access Object for Ticket operations.

    WHAT: Ticket reads, creation and status updates.

    WHY: Centralizes database operations for:
    - Consistent contractor/assignee scoping
    - Joined catalog filters
    - Ticket number allocation

    HOW: All methods are async and use the request session; nothing here
    commits, get_db owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Ticket, session)

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_by_id_with_relations(
        self,
        ticket_id: int,
        refresh: bool = False,
    ) -> Optional[Ticket]:
        """
        Get ticket by ID with catalogs and people loaded.

        WHY: Lazy loading is not available in async context, so the detail
        view must load everything it serializes up front.

        Args:
            ticket_id: Ticket ID
            refresh: Overwrite already-loaded instances (after a mutation)

        Returns:
            Ticket with relations or None
        """
        query = (
            select(Ticket)
            .options(*_TICKET_LOAD_OPTIONS)
            .where(Ticket.id == ticket_id)
        )
        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        scope: ReadScope,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_to: Optional[int] = None,
        search: Optional[str] = None,
        urgent: bool = False,
        criteria: Optional[Sequence[Any]] = None,
        today: Optional[date] = None,
    ) -> Tuple[List[Ticket], int]:
        """
        List tickets inside a read scope with filtering and pagination.

        Args:
            scope: Mandatory scope from AuthorizationGuard.ticket_scope
            page: 1-based page number
            limit: Page size
            status: Status slug
            category: Category slug
            priority: Priority slug
            assigned_to: Assignee user ID
            search: Substring of title, description or ticket number
            urgent: Only priorities at or above the urgent level
            criteria: Caller filter criteria ({field, value} items)
            today: Reference day for presets

        Returns:
            Tuple of (tickets newest first, total count)

        Raises:
            FilterCriteriaError: If too many criteria are given
        """
        query = (
            select(Ticket)
            .join(TicketStatus, Ticket.status_id == TicketStatus.id)
            .outerjoin(Priority, Ticket.priority_id == Priority.id)
            .outerjoin(TicketCategory, Ticket.category_id == TicketCategory.id)
            .where(*scope.conditions(Ticket.contractor_id, Ticket.assigned_to))
        )

        params = [
            {"field": "status", "value": status},
            {"field": "category", "value": category},
            {"field": "priority", "value": priority},
            {"field": "assigned_to", "value": assigned_to},
        ]
        param_expr = FilterExpressionBuilder(
            _QUERY_PARAM_FIELDS, max_criteria=len(params), today=today
        ).build(params)
        if param_expr.clause is not None:
            query = query.where(param_expr.clause)

        criteria_expr = FilterExpressionBuilder(TICKET_FILTER_FIELDS, today=today).build(
            criteria, start_index=param_expr.next_index
        )
        if criteria_expr.clause is not None:
            query = query.where(criteria_expr.clause)

        if urgent:
            query = query.where(Priority.level >= URGENT_PRIORITY_LEVEL)

        if search:
            search_pattern = f"%{search}%"
            query = query.where(
                or_(
                    Ticket.title.ilike(search_pattern),
                    Ticket.description.ilike(search_pattern),
                    Ticket.ticket_number.ilike(search_pattern),
                )
            )

        query = query.order_by(Ticket.created_at.desc(), Ticket.id.desc())
        return await self.paginate(query, page, limit, *_TICKET_LOAD_OPTIONS)

    # =========================================================================
    # Writes
    # =========================================================================

    async def next_ticket_number(self) -> str:
        """
        Allocate the next "#N" ticket number.

        WHAT: Highest numeric suffix across all tickets plus one.

        WHY: Numbers are global, not per contractor. Two concurrent creates
        can read the same maximum; the unique constraint on ticket_number
        then rejects the second insert.
        """
        result = await self.session.execute(
            select(func.max(cast(func.substr(Ticket.ticket_number, 2), Integer)))
        )
        current = result.scalar_one_or_none() or 0
        return f"#{current + 1}"

    async def set_status(
        self,
        ticket: Ticket,
        status: TicketStatus,
        closed_at: Optional[datetime],
        resolved_at: Optional[datetime],
    ) -> Ticket:
        """
        Persist a status change and its closure timestamps.

        Args:
            ticket: Loaded ticket
            status: Target status row
            closed_at: New closed_at (None clears it)
            resolved_at: New resolved_at (None clears it)

        Returns:
            The same ticket, flushed
        """
        ticket.status_id = status.id
        ticket.status = status
        ticket.closed_at = closed_at
        ticket.resolved_at = resolved_at
        ticket.updated_at = utcnow()
        await self.session.flush()
        return ticket

    async def touch(self, ticket: Ticket) -> None:
        """Refresh updated_at (new comment)."""
        ticket.updated_at = utcnow()
        await self.session.flush()


class TicketCommentDAO(BaseDAO[TicketComment]):
    """
    Data Access Object for the ticket comment thread.

    WHY: Comments are immutable once written. update() and delete() exist
    only to fail loudly if anything tries.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(TicketComment, session)

    async def get_with_author(self, comment_id: int) -> Optional[TicketComment]:
        result = await self.session.execute(
            select(TicketComment)
            .options(selectinload(TicketComment.author))
            .where(TicketComment.id == comment_id)
        )
        return result.scalar_one_or_none()

    async def list_for_ticket(
        self,
        ticket_id: int,
        include_internal: bool = True,
    ) -> List[TicketComment]:
        """
        List comments for a ticket, oldest first.

        Args:
            ticket_id: Ticket ID
            include_internal: Whether to include internal notes

        Returns:
            List of comments with authors loaded
        """
        query = (
            select(TicketComment)
            .options(selectinload(TicketComment.author))
            .where(TicketComment.ticket_id == ticket_id)
        )

        if not include_internal:
            query = query.where(TicketComment.is_internal.is_(False))

        query = query.order_by(TicketComment.created_at.asc(), TicketComment.id.asc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update(self, comment_id: int, **kwargs: Any) -> None:
        """Blocked: comments cannot be edited."""
        raise AuditLogImmutableError(
            "Ticket comments are immutable and cannot be updated",
            comment_id=comment_id,
        )

    async def delete(self, comment_id: int) -> None:
        """Blocked: comments cannot be removed."""
        raise AuditLogImmutableError(
            "Ticket comments cannot be deleted",
            comment_id=comment_id,
        )


class TicketHistoryDAO(BaseDAO[TicketHistory]):
    """
    Data Access Object for ticket history.

    WHY: History is append-only. Rows are written in the same transaction
    as the change they describe, so a rolled back change leaves no row.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(TicketHistory, session)

    async def list_for_ticket(self, ticket_id: int, limit: int = 50) -> List[TicketHistory]:
        """
        Most recent history rows for a ticket, newest first.

        Rows written in the same second are ordered by id so the sequence
        stays total.
        """
        result = await self.session.execute(
            select(TicketHistory)
            .options(selectinload(TicketHistory.user))
            .where(TicketHistory.ticket_id == ticket_id)
            .order_by(TicketHistory.created_at.desc(), TicketHistory.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update(self, history_id: int, **kwargs: Any) -> None:
        """Blocked: history rows cannot be edited."""
        raise AuditLogImmutableError(
            "Ticket history is immutable and cannot be updated",
            history_id=history_id,
        )

    async def delete(self, history_id: int) -> None:
        """Blocked: history rows cannot be removed."""
        raise AuditLogImmutableError(
            "Ticket history cannot be deleted",
            history_id=history_id,
        )


class TicketAttachmentDAO(BaseDAO[TicketAttachment]):
    """Read access to ticket attachments (uploads are handled elsewhere)."""

    def __init__(self, session: AsyncSession):
        super().__init__(TicketAttachment, session)

    async def list_for_ticket(self, ticket_id: int) -> List[TicketAttachment]:
        result = await self.session.execute(
            select(TicketAttachment)
            .where(TicketAttachment.ticket_id == ticket_id)
            .order_by(TicketAttachment.created_at.asc(), TicketAttachment.id.asc())
        )
        return list(result.scalars().all())
