"""
Accommodation Data Access Object.

WHY: Inactive units are soft-deleted and must never appear, so every read
here starts from is_active = true.
"""

from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.dao.base import BaseDAO
from backoffice.filters import FilterExpressionBuilder, CalendarWindowPreset
from backoffice.models.accommodation import Accommodation
from backoffice.services.authorization import ReadScope


ACCOMMODATION_FILTER_FIELDS = {
    "status": Accommodation.status,
    "type": Accommodation.type,
    "contractor": Accommodation.current_contractor_id,
    "date_range": CalendarWindowPreset(Accommodation.created_at),
}


class AccommodationDAO(BaseDAO[Accommodation]):
    """Data Access Object for Accommodation operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Accommodation, session)

    async def get_active(self, accommodation_id: int) -> Optional[Accommodation]:
        result = await self.session.execute(
            select(Accommodation).where(
                Accommodation.id == accommodation_id,
                Accommodation.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        scope: ReadScope,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        status: Optional[str] = None,
        type: Optional[str] = None,
        criteria: Optional[Sequence[Any]] = None,
        today: Optional[date] = None,
    ) -> Tuple[List[Accommodation], int]:
        """
        List active accommodations rented by the scoped contractor.

        Args:
            scope: Mandatory scope from AuthorizationGuard.tenant_scope
            search: Substring of name, address or notes
            status: Accommodation status value
            type: Accommodation type value
            criteria: Caller filter criteria

        Returns:
            Tuple of (accommodations ordered by name, total count)
        """
        query = select(Accommodation).where(
            Accommodation.is_active.is_(True),
            *scope.conditions(Accommodation.current_contractor_id),
        )

        if status:
            query = query.where(Accommodation.status == status)
        if type:
            query = query.where(Accommodation.type == type)

        if search:
            search_pattern = f"%{search}%"
            query = query.where(
                or_(
                    Accommodation.name.ilike(search_pattern),
                    Accommodation.address.ilike(search_pattern),
                    Accommodation.notes.ilike(search_pattern),
                )
            )

        expr = FilterExpressionBuilder(ACCOMMODATION_FILTER_FIELDS, today=today).build(criteria)
        if expr.clause is not None:
            query = query.where(expr.clause)

        query = query.order_by(Accommodation.name, Accommodation.id)
        return await self.paginate(query, page, limit)

    async def list_options(self, scope: ReadScope) -> List[Accommodation]:
        """Active accommodations inside a scope, by name (for filter dropdowns)."""
        result = await self.session.execute(
            select(Accommodation)
            .where(
                Accommodation.is_active.is_(True),
                *scope.conditions(Accommodation.current_contractor_id),
            )
            .order_by(Accommodation.name, Accommodation.id)
        )
        return list(result.scalars().all())
