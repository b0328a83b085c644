"""
Employee Data Access Object.

WHAT: Scoped employee listing, detail lookup and notification recipient
resolution.

WHY: The employee list and the bulk-notification targeting accept the same
filter fields, so both compile criteria against EMPLOYEE_FILTER_FIELDS.
"""

from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.dao.base import BaseDAO
from backoffice.filters import FilterExpressionBuilder, ExpiryWindowPreset, AgeBandPreset
from backoffice.models.employee import Employee, EmployeeStatusType
from backoffice.models.user import User
from backoffice.services.authorization import ReadScope


VISA_EXPIRY_WINDOWS = (30, 60)
CONTRACT_END_WINDOWS = (30, 60, 90)

# Criterion field -> column or preset for employees and notification recipients
EMPLOYEE_FILTER_FIELDS = {
    "status": EmployeeStatusType.slug,
    "workplace": Employee.workplace,
    "accommodation": Employee.accommodation_id,
    "gender": Employee.gender,
    "marital_status": Employee.marital_status,
    "position": Employee.position,
    "country": Employee.permanent_address_country,
    "visa_expiry": ExpiryWindowPreset(Employee.visa_expiry, VISA_EXPIRY_WINDOWS),
    "contract_end": ExpiryWindowPreset(
        Employee.end_date, CONTRACT_END_WINDOWS, allow_valid=False
    ),
    "birth_year": AgeBandPreset(Employee.birth_date),
}

_EMPLOYEE_LOAD_OPTIONS = (
    selectinload(Employee.user),
    selectinload(Employee.status),
    selectinload(Employee.accommodation),
)

# Address a message would go to: company mailbox, else login email
RECIPIENT_EMAIL = func.coalesce(Employee.company_email, User.email)


class EmployeeDAO(BaseDAO[Employee]):
    """Data Access Object for Employee operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Employee, session)

    def _scoped(self, scope: ReadScope):
        return (
            select(Employee)
            .outerjoin(EmployeeStatusType, Employee.status_id == EmployeeStatusType.id)
            .outerjoin(User, Employee.user_id == User.id)
            .where(*scope.conditions(Employee.contractor_id))
        )

    @staticmethod
    def _apply_criteria(query, criteria: Optional[Sequence[Any]], today: Optional[date]):
        expr = FilterExpressionBuilder(EMPLOYEE_FILTER_FIELDS, today=today).build(criteria)
        if expr.clause is not None:
            query = query.where(expr.clause)
        return query

    async def get_with_relations(self, employee_id: int) -> Optional[Employee]:
        result = await self.session.execute(
            select(Employee)
            .options(*_EMPLOYEE_LOAD_OPTIONS)
            .where(Employee.id == employee_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        scope: ReadScope,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        status: Optional[str] = None,
        criteria: Optional[Sequence[Any]] = None,
        today: Optional[date] = None,
    ) -> Tuple[List[Employee], int]:
        """
        List employees inside a tenant scope.

        Args:
            scope: Mandatory scope from AuthorizationGuard.tenant_scope
            page: 1-based page number
            limit: Page size
            search: Substring of first/last name, company email or employee number
            status: Employee status slug
            criteria: Caller filter criteria
            today: Reference day for presets

        Returns:
            Tuple of (employees ordered by last, first name; total count)

        Raises:
            FilterCriteriaError: If too many criteria are given
        """
        query = self._scoped(scope)

        if status:
            query = query.where(EmployeeStatusType.slug == status)

        if search:
            search_pattern = f"%{search}%"
            query = query.where(
                or_(
                    Employee.first_name.ilike(search_pattern),
                    Employee.last_name.ilike(search_pattern),
                    Employee.company_email.ilike(search_pattern),
                    Employee.employee_number.ilike(search_pattern),
                )
            )

        query = self._apply_criteria(query, criteria, today)
        query = query.order_by(Employee.last_name, Employee.first_name, Employee.id)
        return await self.paginate(query, page, limit, *_EMPLOYEE_LOAD_OPTIONS)

    # =========================================================================
    # Notification recipients
    # =========================================================================

    async def find_recipients(
        self,
        scope: ReadScope,
        criteria: Optional[Sequence[Any]] = None,
        today: Optional[date] = None,
    ) -> List[Employee]:
        """
        Employees with a usable email address matching the criteria.

        Returns:
            Employees ordered by last name, first name
        """
        query = self._scoped(scope).where(RECIPIENT_EMAIL.is_not(None))
        query = self._apply_criteria(query, criteria, today)
        query = query.options(*_EMPLOYEE_LOAD_OPTIONS).order_by(
            Employee.last_name, Employee.first_name, Employee.id
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_recipients_by_ids(
        self,
        scope: ReadScope,
        employee_ids: Sequence[int],
    ) -> List[Employee]:
        """
        Resolve explicit recipient IDs, keeping only in-scope employees with
        an email address.
        """
        if not employee_ids:
            return []
        query = (
            self._scoped(scope)
            .where(Employee.id.in_(list(employee_ids)), RECIPIENT_EMAIL.is_not(None))
            .options(*_EMPLOYEE_LOAD_OPTIONS)
            .order_by(Employee.last_name, Employee.first_name, Employee.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    # =========================================================================
    # Filter options
    # =========================================================================

    async def list_status_types(self) -> List[EmployeeStatusType]:
        result = await self.session.execute(
            select(EmployeeStatusType).order_by(EmployeeStatusType.name)
        )
        return list(result.scalars().all())

    async def distinct_values(self, scope: ReadScope, column: Any) -> List[str]:
        """
        Distinct non-empty values of an employee column inside a scope.

        WHY: Populates the dropdowns of the recipient filter form with the
        values that actually occur (workplaces, positions, countries).
        """
        result = await self.session.execute(
            select(column)
            .where(
                column.is_not(None),
                column != "",
                *scope.conditions(Employee.contractor_id),
            )
            .distinct()
            .order_by(column)
        )
        return list(result.scalars().all())
