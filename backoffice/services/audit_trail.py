"""
Ticket audit trail service.

WHAT: Append-only history and comment thread for tickets.

WHY: Every lifecycle fact ("created", "status_changed") and every comment
is written in the same unit of work as the change it describes. If the
change rolls back, so does its trail; if the trail cannot be written, the
change fails. Unlike request access logging, nothing here is best-effort.

HOW: Thin layer over TicketHistoryDAO and TicketCommentDAO. There is no
update or delete path; the DAOs raise AuditLogImmutableError if asked.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.dao.ticket import TicketCommentDAO, TicketHistoryDAO
from backoffice.models.ticket import (
    Ticket,
    TicketComment,
    TicketHistory,
    HISTORY_ACTION_CREATED,
    HISTORY_ACTION_STATUS_CHANGED,
)


logger = logging.getLogger(__name__)


class AuditTrail:
    """
    Writer and reader for a ticket's history and comments.

    Example:
        trail = AuditTrail(db)
        await trail.record_status_change(ticket.id, user_id, "New", "Completed")
        history = await trail.list_history(ticket.id)
    """

    def __init__(self, session: AsyncSession):
        self.history_dao = TicketHistoryDAO(session)
        self.comment_dao = TicketCommentDAO(session)

    # =========================================================================
    # History
    # =========================================================================

    async def record(
        self,
        ticket_id: int,
        user_id: Optional[int],
        action: str,
        field_name: Optional[str] = None,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
    ) -> TicketHistory:
        """
        Append one history row.

        Args:
            ticket_id: Ticket the fact belongs to
            user_id: Acting user
            action: Action name ("created", "status_changed", ...)
            field_name: Changed field, if the action changes one
            old_value: Display value before the change
            new_value: Display value after the change

        Returns:
            The persisted row
        """
        entry = await self.history_dao.create(
            ticket_id=ticket_id,
            user_id=user_id,
            action=action,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
        )
        logger.debug(f"History {action} recorded for ticket {ticket_id}")
        return entry

    async def record_created(self, ticket: Ticket, user_id: int) -> TicketHistory:
        return await self.record(
            ticket.id, user_id, HISTORY_ACTION_CREATED, new_value=ticket.title
        )

    async def record_status_change(
        self,
        ticket_id: int,
        user_id: int,
        old_status_name: Optional[str],
        new_status_name: str,
    ) -> TicketHistory:
        return await self.record(
            ticket_id,
            user_id,
            HISTORY_ACTION_STATUS_CHANGED,
            field_name="status",
            old_value=old_status_name,
            new_value=new_status_name,
        )

    async def list_history(
        self, ticket_id: int, limit: Optional[int] = None
    ) -> List[TicketHistory]:
        """
        Most recent history rows, newest first (ties broken by id).

        Args:
            ticket_id: Ticket ID
            limit: Row cap (defaults to TICKET_HISTORY_LIMIT)
        """
        if limit is None:
            limit = settings.TICKET_HISTORY_LIMIT
        return await self.history_dao.list_for_ticket(ticket_id, limit=limit)

    # =========================================================================
    # Comments
    # =========================================================================

    async def add_comment(
        self,
        ticket_id: int,
        user_id: int,
        comment: str,
        is_internal: bool = False,
    ) -> TicketComment:
        """
        Append a comment and return it with its author loaded.

        Returns:
            The persisted comment
        """
        created = await self.comment_dao.create(
            ticket_id=ticket_id,
            user_id=user_id,
            comment=comment,
            is_internal=is_internal,
        )
        return await self.comment_dao.get_with_author(created.id)

    async def list_comments(
        self, ticket_id: int, include_internal: bool = True
    ) -> List[TicketComment]:
        """Comment thread, oldest first."""
        return await self.comment_dao.list_for_ticket(ticket_id, include_internal)
