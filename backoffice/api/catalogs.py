"""
Catalog API endpoints.

WHAT: Read-only status, priority and category lists for ticket forms.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.deps import get_identity
from backoffice.core.identity import IdentityContext
from backoffice.dao.catalog import CatalogDAO
from backoffice.db.session import get_db
from backoffice.schemas.catalog import StatusResponse, PriorityResponse, CategoryResponse
from backoffice.services.authorization import AuthorizationGuard


router = APIRouter(tags=["catalogs"])


@router.get(
    "/statuses",
    response_model=List[StatusResponse],
    status_code=status.HTTP_200_OK,
    summary="List ticket statuses",
)
async def list_statuses(
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> List[StatusResponse]:
    """Statuses in workflow order (order_index)."""
    statuses = await CatalogDAO(db).list_statuses()
    return [StatusResponse.model_validate(s) for s in statuses]


@router.get(
    "/priorities",
    response_model=List[PriorityResponse],
    status_code=status.HTTP_200_OK,
    summary="List priorities",
)
async def list_priorities(
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> List[PriorityResponse]:
    """Priorities, most urgent first."""
    priorities = await CatalogDAO(db).list_priorities()
    return [PriorityResponse.model_validate(p) for p in priorities]


@router.get(
    "/categories",
    response_model=List[CategoryResponse],
    status_code=status.HTTP_200_OK,
    summary="List ticket categories",
)
async def list_categories(
    identity: IdentityContext = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> List[CategoryResponse]:
    """Shared categories plus those owned by the caller's contractor."""
    categories = await CatalogDAO(db).list_categories(AuthorizationGuard.tenant_scope(identity))
    return [CategoryResponse.model_validate(c) for c in categories]
