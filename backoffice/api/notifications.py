"""
Bulk notification API endpoints.

WHAT: Template listing, recipient targeting and bulk email for
administrators.

WHY: Reminders (visa renewal, contract end) go to employees selected with
the same filters the employee list uses.

HOW: Requires an administrative role. The transport is injected through
get_notification_provider so tests can swap in the mock provider.
"""

from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.deps import require_admin
from backoffice.core.identity import IdentityContext
from backoffice.db.session import get_db
from backoffice.models.employee import Employee
from backoffice.schemas.common import Pagination
from backoffice.schemas.employee import EmployeeStatusResponse, AccommodationReference
from backoffice.schemas.notification import (
    NotificationTemplateResponse,
    FilterRecipientsRequest,
    FilterOptionsResponse,
    RecipientResponse,
    RecipientListResponse,
    SendBulkRequest,
    SendBulkResponse,
    SendError,
    EmailLogResponse,
    EmailLogListResponse,
)
from backoffice.services.notification_dispatcher import (
    NotificationProvider,
    get_notification_provider,
)
from backoffice.services.notification_service import NotificationService


router = APIRouter(prefix="/notifications", tags=["notifications"])


def _recipient_to_response(employee: Employee) -> RecipientResponse:
    return RecipientResponse(
        id=employee.id,
        name=employee.full_name,
        email=employee.email,
        workplace=employee.workplace,
        accommodation=employee.accommodation.name if employee.accommodation else None,
        visa_expiry=employee.visa_expiry,
        contract_end=employee.end_date,
    )


@router.get(
    "/templates",
    response_model=List[NotificationTemplateResponse],
    status_code=status.HTTP_200_OK,
    summary="List notification templates",
)
async def list_templates(
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    provider: NotificationProvider = Depends(get_notification_provider),
) -> List[NotificationTemplateResponse]:
    """Active templates ordered by name."""
    templates = await NotificationService(db, provider).list_templates()
    return [NotificationTemplateResponse.model_validate(t) for t in templates]


@router.get(
    "/filter-options",
    response_model=FilterOptionsResponse,
    status_code=status.HTTP_200_OK,
    summary="Recipient filter options",
    description="Values that occur for the recipient filter dropdowns",
)
async def filter_options(
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    provider: NotificationProvider = Depends(get_notification_provider),
) -> FilterOptionsResponse:
    options = await NotificationService(db, provider).filter_options(identity)
    return FilterOptionsResponse(
        statuses=[EmployeeStatusResponse.model_validate(s) for s in options["statuses"]],
        workplaces=options["workplaces"],
        accommodations=[
            AccommodationReference.model_validate(a) for a in options["accommodations"]
        ],
        positions=options["positions"],
        countries=options["countries"],
    )


@router.post(
    "/filter-recipients",
    response_model=RecipientListResponse,
    status_code=status.HTTP_200_OK,
    summary="Filter recipients",
    description="Employees with an email address matching the filter criteria",
)
async def filter_recipients(
    data: FilterRecipientsRequest,
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    provider: NotificationProvider = Depends(get_notification_provider),
) -> RecipientListResponse:
    """
    Resolve recipients for a filter set.

    Raises:
        FilterCriteriaError (400): Too many criteria
    """
    recipients = await NotificationService(db, provider).filter_recipients(
        identity, data.filters
    )
    return RecipientListResponse(
        recipients=[_recipient_to_response(r) for r in recipients],
        total=len(recipients),
    )


@router.post(
    "/send-bulk",
    response_model=SendBulkResponse,
    status_code=status.HTTP_200_OK,
    summary="Send bulk email",
    description="Render and send one email per recipient, logging each attempt",
)
async def send_bulk(
    data: SendBulkRequest,
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    provider: NotificationProvider = Depends(get_notification_provider),
) -> SendBulkResponse:
    """
    Send a bulk email.

    WHY: Individual delivery failures are reported in errors and logged;
    they do not fail the request.

    Raises:
        ValidationError (400): No usable recipient, or no subject/body
    """
    result = await NotificationService(db, provider).send_bulk(
        identity,
        recipient_ids=data.recipient_ids,
        template_slug=data.template_slug,
        subject=data.subject,
        body=data.body,
        variables=data.variables,
    )
    return SendBulkResponse(
        sent=result.sent,
        failed=result.failed,
        errors=[SendError(**error) for error in result.errors],
    )


@router.get(
    "/email-logs",
    response_model=EmailLogListResponse,
    status_code=status.HTTP_200_OK,
    summary="List email logs",
    description="Delivery log, newest first (platform administrators only)",
)
async def list_email_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    identity: IdentityContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    provider: NotificationProvider = Depends(get_notification_provider),
) -> EmailLogListResponse:
    logs, total = await NotificationService(db, provider).list_email_logs(identity, page, limit)
    return EmailLogListResponse(
        logs=[EmailLogResponse.model_validate(log) for log in logs],
        pagination=Pagination.build(total, page, limit),
    )
