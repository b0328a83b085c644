"""
Accommodation API endpoints.

WHAT: Administrative listing and detail of active housing units, scoped to
the contractor currently renting them.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.deps import require_admin
from backoffice.core.exceptions import AccommodationNotFoundError, AuthorizationError
from backoffice.core.identity import IdentityContext
from backoffice.dao.accommodation import AccommodationDAO
from backoffice.db.session import get_db
from backoffice.filters import parse_filters_param
from backoffice.schemas.accommodation import AccommodationResponse, AccommodationListResponse
from backoffice.schemas.common import Pagination
from backoffice.services.authorization import AuthorizationGuard


router = APIRouter(prefix="/accommodations", tags=["accommodations"])


@router.get(
    "",
    response_model=AccommodationListResponse,
    status_code=status.HTTP_200_OK,
    summary="List accommodations",
)
async def list_accommodations(
    search: Optional[str] = Query(None, description="Name, address or notes"),
    status_filter: Optional[str] = Query(None, alias="status"),
    type_filter: Optional[str] = Query(None, alias="type"),
    filters: Optional[str] = Query(None, description="JSON array of {field, value}"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AccommodationListResponse:
    """List active accommodations ordered by name."""
    accommodations, total = await AccommodationDAO(db).list(
        AuthorizationGuard.tenant_scope(identity),
        page=page,
        limit=limit,
        search=search,
        status=status_filter,
        type=type_filter,
        criteria=parse_filters_param(filters),
    )
    return AccommodationListResponse(
        accommodations=[AccommodationResponse.model_validate(a) for a in accommodations],
        pagination=Pagination.build(total, page, limit),
    )


@router.get(
    "/{accommodation_id}",
    response_model=AccommodationResponse,
    status_code=status.HTTP_200_OK,
    summary="Get accommodation",
)
async def get_accommodation(
    accommodation_id: int,
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AccommodationResponse:
    """
    Get one active accommodation.

    Raises:
        AccommodationNotFoundError (404): Unknown or inactive
        AuthorizationError (403): Rented by another contractor
    """
    accommodation = await AccommodationDAO(db).get_active(accommodation_id)
    if accommodation is None:
        raise AccommodationNotFoundError(accommodation_id=accommodation_id)

    scope = AuthorizationGuard.tenant_scope(identity)
    if not scope.permits(accommodation.current_contractor_id):
        raise AuthorizationError("You do not have access to this accommodation")

    return AccommodationResponse.model_validate(accommodation)
