"""
Catalog Data Access Object.

WHAT: Read access to the ticket status, priority and category catalogs.

WHY: Catalogs are seeded by migration and only read through the API;
keeping their ordering rules in one place keeps the dropdowns consistent.
"""

from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.ticket import TicketStatus, Priority, TicketCategory
from backoffice.services.authorization import ReadScope


class CatalogDAO:
    """Lookups over the ticket catalogs."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # Statuses
    # =========================================================================

    async def list_statuses(self) -> List[TicketStatus]:
        result = await self.session.execute(
            select(TicketStatus).order_by(TicketStatus.order_index, TicketStatus.id)
        )
        return list(result.scalars().all())

    async def get_status(self, status_id: int) -> Optional[TicketStatus]:
        return await self.session.get(TicketStatus, status_id)

    async def get_status_by_slug(self, slug: str) -> Optional[TicketStatus]:
        result = await self.session.execute(
            select(TicketStatus).where(TicketStatus.slug == slug)
        )
        return result.scalar_one_or_none()

    # =========================================================================
    # Priorities
    # =========================================================================

    async def list_priorities(self) -> List[Priority]:
        """Highest level first."""
        result = await self.session.execute(
            select(Priority).order_by(Priority.level.desc())
        )
        return list(result.scalars().all())

    async def get_priority(self, priority_id: int) -> Optional[Priority]:
        return await self.session.get(Priority, priority_id)

    # =========================================================================
    # Categories
    # =========================================================================

    async def list_categories(self, scope: ReadScope) -> List[TicketCategory]:
        """
        Categories visible inside a tenant scope.

        WHY: Shared categories (contractor_id NULL) are visible to everyone;
        contractor-owned ones only to that contractor. An unrestricted scope
        sees all of them.
        """
        query = select(TicketCategory)
        if scope.deny_all:
            query = query.where(TicketCategory.contractor_id.is_(None))
        elif scope.contractor_id is not None:
            query = query.where(
                or_(
                    TicketCategory.contractor_id.is_(None),
                    TicketCategory.contractor_id == scope.contractor_id,
                )
            )
        result = await self.session.execute(query.order_by(TicketCategory.name))
        return list(result.scalars().all())

    async def get_category(self, category_id: int) -> Optional[TicketCategory]:
        return await self.session.get(TicketCategory, category_id)
