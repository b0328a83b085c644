"""
Ticket lifecycle service.

WHAT: Business logic for creating tickets, moving them through the status
catalog, commenting, and reading them inside the caller's scope.

WHY: The service layer:
1. Asks AuthorizationGuard before any side effect
2. Validates references (category, priority, assignee, status)
3. Applies the closure timestamps that go with terminal statuses
4. Writes the audit trail in the same unit of work as the change

HOW: Orchestrates the ticket and catalog DAOs plus AuditTrail. Nothing here
commits; get_db commits the request's transaction or rolls it back when any
of the errors below propagate.

The status graph is unrestricted: any status may follow any other except
itself. Concurrent transitions are last-write-wins (there is no version
column), and two concurrent creates can race for the same ticket number,
in which case the unique constraint rejects the second one.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.exceptions import (
    AppException,
    AuthorizationError,
    InsufficientPermissionsError,
    InvalidStateTransitionError,
    TicketAccessDenied,
    TicketNotFoundError,
    TicketTransitionDenied,
    ValidationError,
)
from backoffice.core.identity import IdentityContext
from backoffice.dao.catalog import CatalogDAO
from backoffice.dao.ticket import TicketAttachmentDAO, TicketDAO
from backoffice.dao.user import UserDAO
from backoffice.middleware.request_context import get_request_id
from backoffice.models.base import utcnow
from backoffice.models.ticket import (
    Ticket,
    TicketAttachment,
    TicketComment,
    TicketHistory,
    INITIAL_STATUS_SLUG,
    RESOLVED_STATUS_SLUG,
)
from backoffice.services.audit_trail import AuditTrail
from backoffice.services.authorization import AuthorizationGuard


logger = logging.getLogger(__name__)


@dataclass
class TicketDetail:
    """Ticket plus the thread and history shown on the detail view."""

    ticket: Ticket
    comments: List[TicketComment]
    history: List[TicketHistory]
    attachments: List[TicketAttachment]


class TicketLifecycleService:
    """
    Service for ticket operations.

    Example:
        service = TicketLifecycleService(db)
        ticket = await service.create_ticket(identity, title="Leaky pipe")
        ticket = await service.transition_status(identity, ticket.id, completed.id)
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize TicketLifecycleService.

        Args:
            session: Async database session (the request's unit of work)
        """
        self.session = session
        self.ticket_dao = TicketDAO(session)
        self.attachment_dao = TicketAttachmentDAO(session)
        self.catalog_dao = CatalogDAO(session)
        self.user_dao = UserDAO(session)
        self.trail = AuditTrail(session)

    # =========================================================================
    # Reads
    # =========================================================================

    async def list_tickets(
        self,
        identity: IdentityContext,
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
        List tickets visible to the caller, newest first.

        WHY: The guard's scope is always applied; caller filters can only
        narrow it further.

        Returns:
            Tuple of (tickets, total count)

        Raises:
            FilterCriteriaError: If too many criteria are given
        """
        scope = AuthorizationGuard.ticket_scope(identity)
        return await self.ticket_dao.list(
            scope,
            page=page,
            limit=limit,
            status=status,
            category=category,
            priority=priority,
            assigned_to=assigned_to,
            search=search,
            urgent=urgent,
            criteria=criteria,
            today=today,
        )

    async def get_ticket(self, identity: IdentityContext, ticket_id: int) -> TicketDetail:
        """
        Ticket detail with comments, history and attachments in upload order.

        Raises:
            TicketNotFoundError: If the ticket does not exist
            TicketAccessDenied: If it exists outside the caller's scope
        """
        ticket = await self._get_readable(identity, ticket_id)
        comments = await self.trail.list_comments(
            ticket.id,
            include_internal=AuthorizationGuard.can_see_internal_comments(identity),
        )
        history = await self.trail.list_history(ticket.id)
        attachments = await self.attachment_dao.list_for_ticket(ticket.id)
        return TicketDetail(
            ticket=ticket, comments=comments, history=history, attachments=attachments
        )

    # =========================================================================
    # Create
    # =========================================================================

    async def create_ticket(
        self,
        identity: IdentityContext,
        title: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        priority_id: Optional[int] = None,
        assigned_to: Optional[int] = None,
        due_date: Optional[date] = None,
        contractor_id: Optional[int] = None,
    ) -> Ticket:
        """
        Open a new ticket in status "new".

        Args:
            identity: Caller
            title: Ticket title (required, non-blank)
            description: Free text
            category_id: Category; contractor-owned categories must match
            priority_id: Priority
            assigned_to: Assignee user ID
            due_date: Due date
            contractor_id: Owning contractor (required for platform callers
                without a contractor of their own)

        Returns:
            Created Ticket with relations loaded

        Raises:
            ValidationError: Blank title or unknown reference
            AuthorizationError: Creating inside another contractor
        """
        if not title or not title.strip():
            raise ValidationError("Title is required", field="title")

        if contractor_id is None:
            contractor_id = identity.contractor_id
        if contractor_id is None:
            raise ValidationError("contractor_id is required", field="contractor_id")

        if not AuthorizationGuard.can_create_ticket(identity, contractor_id):
            logger.warning(
                f"User {identity.user_id} denied ticket creation in contractor {contractor_id} "
                f"request_id={get_request_id()}"
            )
            raise AuthorizationError("You cannot create tickets for another contractor")

        if category_id is not None:
            category = await self.catalog_dao.get_category(category_id)
            if category is None:
                raise ValidationError("Category not found", category_id=category_id)
            if category.contractor_id is not None and category.contractor_id != contractor_id:
                raise ValidationError(
                    "Category belongs to another contractor", category_id=category_id
                )

        if priority_id is not None:
            if await self.catalog_dao.get_priority(priority_id) is None:
                raise ValidationError("Priority not found", priority_id=priority_id)

        if assigned_to is not None:
            if await self.user_dao.get_active(assigned_to) is None:
                raise ValidationError("Assignee not found", assigned_to=assigned_to)

        status = await self.catalog_dao.get_status_by_slug(INITIAL_STATUS_SLUG)
        if status is None:
            raise AppException(f"Ticket status '{INITIAL_STATUS_SLUG}' is not seeded")

        ticket_number = await self.ticket_dao.next_ticket_number()
        ticket = await self.ticket_dao.create(
            ticket_number=ticket_number,
            contractor_id=contractor_id,
            title=title.strip(),
            description=description,
            category_id=category_id,
            priority_id=priority_id,
            status_id=status.id,
            created_by=identity.user_id,
            assigned_to=assigned_to,
            due_date=due_date,
        )
        await self.trail.record_created(ticket, identity.user_id)

        logger.info(
            f"Ticket {ticket.id} ({ticket_number}) created in contractor {contractor_id} "
            f"by user {identity.user_id}"
        )
        return await self.ticket_dao.get_by_id_with_relations(ticket.id, refresh=True)

    # =========================================================================
    # Status workflow
    # =========================================================================

    async def transition_status(
        self,
        identity: IdentityContext,
        ticket_id: int,
        status_id: int,
        comment: Optional[str] = None,
    ) -> Ticket:
        """
        Move a ticket to another status.

        WHAT: Terminal targets set closed_at (and resolved_at for
        "completed"); non-terminal targets clear both, which is how a closed
        ticket is reopened.

        Args:
            identity: Caller
            ticket_id: Ticket ID
            status_id: Target status ID
            comment: Optional comment appended with the change

        Returns:
            Updated Ticket with relations loaded

        Raises:
            TicketNotFoundError: If the ticket does not exist
            TicketAccessDenied: If it is outside the caller's scope
            TicketTransitionDenied: If the caller may read but not transition
            ValidationError: If the target status does not exist
            InvalidStateTransitionError: If the target equals the current status
        """
        ticket = await self._get_readable(identity, ticket_id)

        if not AuthorizationGuard.can_transition(identity, ticket):
            logger.warning(
                f"User {identity.user_id} denied status change on ticket {ticket_id} "
                f"request_id={get_request_id()}"
            )
            raise TicketTransitionDenied()

        new_status = await self.catalog_dao.get_status(status_id)
        if new_status is None:
            raise ValidationError("Status not found", status_id=status_id)

        if new_status.id == ticket.status_id:
            raise InvalidStateTransitionError(
                f"Ticket is already in status '{new_status.name}'",
                status=new_status.slug,
            )

        old_status_name = ticket.status.name if ticket.status else None
        now = utcnow()
        closed_at = now if new_status.is_final else None
        resolved_at = now if new_status.slug == RESOLVED_STATUS_SLUG else None

        await self.ticket_dao.set_status(ticket, new_status, closed_at, resolved_at)
        await self.trail.record_status_change(
            ticket.id, identity.user_id, old_status_name, new_status.name
        )

        if comment and comment.strip():
            await self.trail.add_comment(ticket.id, identity.user_id, comment.strip())

        logger.info(
            f"Ticket {ticket.id} moved from {old_status_name} to {new_status.slug} "
            f"by user {identity.user_id}"
        )
        return await self.ticket_dao.get_by_id_with_relations(ticket.id, refresh=True)

    # =========================================================================
    # Comments
    # =========================================================================

    async def add_comment(
        self,
        identity: IdentityContext,
        ticket_id: int,
        body: str,
        is_internal: bool = False,
    ) -> TicketComment:
        """
        Append a comment to a ticket.

        WHY: Commenting only needs contractor scope; an external assignee
        may comment on any ticket of their contractor. Callers who cannot
        see internal comments cannot write them either.

        Returns:
            The comment with its author loaded

        Raises:
            ValidationError: Blank body
            TicketNotFoundError: If the ticket does not exist
            TicketAccessDenied: Outside the caller's contractor
            InsufficientPermissionsError: Internal comment from a caller who
                cannot see internal comments
        """
        if not body or not body.strip():
            raise ValidationError("Comment is required", field="comment")

        ticket = await self.ticket_dao.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id=ticket_id)

        if not AuthorizationGuard.can_comment(identity, ticket):
            logger.warning(
                f"User {identity.user_id} denied commenting on ticket {ticket_id} "
                f"request_id={get_request_id()}"
            )
            raise TicketAccessDenied()

        if is_internal and not AuthorizationGuard.can_see_internal_comments(identity):
            logger.warning(
                f"User {identity.user_id} denied internal comment on ticket {ticket_id} "
                f"request_id={get_request_id()}"
            )
            raise InsufficientPermissionsError("Internal comments are not available to your role")

        created = await self.trail.add_comment(
            ticket.id, identity.user_id, body.strip(), is_internal=is_internal
        )
        await self.ticket_dao.touch(ticket)

        logger.info(f"Comment {created.id} added to ticket {ticket.id} by user {identity.user_id}")
        return created

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_readable(self, identity: IdentityContext, ticket_id: int) -> Ticket:
        """Load a ticket, distinguishing absent (404) from out of scope (403)."""
        ticket = await self.ticket_dao.get_by_id_with_relations(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id=ticket_id)

        if not AuthorizationGuard.can_read_ticket(identity, ticket):
            logger.warning(
                f"User {identity.user_id} denied access to ticket {ticket_id} "
                f"request_id={get_request_id()}"
            )
            raise TicketAccessDenied()

        return ticket
