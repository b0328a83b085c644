"""
Employee API endpoints.

WHAT: Administrative, contractor-scoped employee listing and detail.

HOW: Requires an administrative role. The tenant scope from
AuthorizationGuard restricts everything; search, status and the filters
array (visa/contract windows, age bands, workplace, ...) narrow it.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.deps import require_admin
from backoffice.core.exceptions import AuthorizationError, EmployeeNotFoundError
from backoffice.core.identity import IdentityContext
from backoffice.dao.employee import EmployeeDAO
from backoffice.db.session import get_db
from backoffice.filters import parse_filters_param
from backoffice.schemas.common import Pagination
from backoffice.schemas.employee import EmployeeResponse, EmployeeListResponse
from backoffice.services.authorization import AuthorizationGuard


router = APIRouter(prefix="/employees", tags=["employees"])


@router.get(
    "",
    response_model=EmployeeListResponse,
    status_code=status.HTTP_200_OK,
    summary="List employees",
)
async def list_employees(
    search: Optional[str] = Query(None, description="Name, email or employee number"),
    status_filter: Optional[str] = Query(None, alias="status", description="Status slug"),
    filters: Optional[str] = Query(None, description="JSON array of {field, value}"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmployeeListResponse:
    """
    List employees ordered by last name, first name.

    Raises:
        FilterCriteriaError (400): Too many criteria
    """
    employees, total = await EmployeeDAO(db).list(
        AuthorizationGuard.tenant_scope(identity),
        page=page,
        limit=limit,
        search=search,
        status=status_filter,
        criteria=parse_filters_param(filters),
    )
    return EmployeeListResponse(
        employees=[EmployeeResponse.model_validate(e) for e in employees],
        pagination=Pagination.build(total, page, limit),
    )


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get employee",
)
async def get_employee(
    employee_id: int,
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> EmployeeResponse:
    """
    Get one employee.

    Raises:
        EmployeeNotFoundError (404): Unknown ID
        AuthorizationError (403): Employee of another contractor
    """
    employee = await EmployeeDAO(db).get_with_relations(employee_id)
    if employee is None:
        raise EmployeeNotFoundError(employee_id=employee_id)

    if not AuthorizationGuard.tenant_scope(identity).permits(employee.contractor_id):
        raise AuthorizationError("You do not have access to this employee")

    return EmployeeResponse.model_validate(employee)
