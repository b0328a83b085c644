"""
Bulk notification service.

WHAT: Recipient targeting and bulk email for administrators: pick employees
with the shared filter criteria, render a template per recipient, send
through the dispatcher and log every attempt.

WHY: Visa and contract reminders go to groups selected by the same filters
the employee list uses ("visa expires in 30 days", "works at Site A").
A failed delivery must not stop the rest of the batch, and every attempt
is logged with the content that recipient actually received.

HOW: A sandboxed Jinja2 environment renders `{{ variable }}` placeholders,
since subjects and bodies come from tenant administrators. Unknown placeholders are
left in place (DebugUndefined) rather than blanked, so a typo is visible in
the log instead of silently vanishing. Bodies are HTML and autoescaped;
subjects are plain text.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import BaseLoader, DebugUndefined, TemplateError, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.exceptions import (
    InsufficientPermissionsError,
    TemplateRenderError,
    ValidationError,
)
from backoffice.core.identity import IdentityContext
from backoffice.dao.accommodation import AccommodationDAO
from backoffice.dao.employee import EmployeeDAO
from backoffice.dao.notification import EmailLogDAO, NotificationTemplateDAO
from backoffice.models.employee import Employee
from backoffice.models.notification import (
    EmailLog,
    EmailLogStatus,
    NotificationTemplate,
    GENERAL_TEMPLATE_SLUG,
)
from backoffice.services.authorization import AuthorizationGuard
from backoffice.services.notification_dispatcher import (
    NotificationMessage,
    NotificationProvider,
    get_notification_provider,
)


logger = logging.getLogger(__name__)


_html_env = SandboxedEnvironment(loader=BaseLoader(), autoescape=True, undefined=DebugUndefined)
_text_env = SandboxedEnvironment(loader=BaseLoader(), autoescape=False, undefined=DebugUndefined)


def render_template(source: Optional[str], variables: Dict[str, Any], html: bool = True) -> str:
    """
    Fill `{{ name }}` placeholders.

    Args:
        source: Template text
        variables: Placeholder values
        html: Escape values for an HTML body

    Returns:
        Rendered text (placeholders without a value are kept verbatim)

    Raises:
        TemplateRenderError: On syntax errors, undefined lookups or unsafe
            attribute access
    """
    if not source:
        return source or ""
    env = _html_env if html else _text_env
    try:
        return env.from_string(source).render(variables)
    except TemplateSyntaxError as e:
        raise TemplateRenderError(
            "Template syntax error",
            error=str(e),
            line=e.lineno,
        )
    except TemplateError as e:
        # Undefined lookups like {{ user.name }} and sandbox violations
        raise TemplateRenderError("Template could not be rendered", error=str(e))


def _format_date(value: Optional[date]) -> str:
    return value.isoformat() if value else ""


def recipient_variables(employee: Employee) -> Dict[str, str]:
    """Per-recipient placeholder values."""
    return {
        "name": employee.full_name,
        "workplace": employee.workplace or "",
        "accommodation": employee.accommodation.name if employee.accommodation else "",
        "visa_expiry": _format_date(employee.visa_expiry),
        "contract_end": _format_date(employee.end_date),
    }


@dataclass
class BulkSendResult:
    """Summary returned by send_bulk."""

    sent: int = 0
    failed: int = 0
    errors: List[Dict[str, Optional[str]]] = field(default_factory=list)


class NotificationService:
    """
    Recipient targeting and bulk delivery.

    Attributes:
        provider: Transport used for sending (Resend or mock)
    """

    def __init__(
        self,
        session: AsyncSession,
        provider: Optional[NotificationProvider] = None,
    ):
        """
        Initialize NotificationService.

        Args:
            session: Async database session
            provider: Transport (chosen from configuration if not provided)
        """
        self.session = session
        self.provider = provider or get_notification_provider()
        self.employee_dao = EmployeeDAO(session)
        self.accommodation_dao = AccommodationDAO(session)
        self.template_dao = NotificationTemplateDAO(session)
        self.log_dao = EmailLogDAO(session)

    # =========================================================================
    # Targeting
    # =========================================================================

    async def list_templates(self) -> List[NotificationTemplate]:
        return await self.template_dao.list_active()

    async def filter_options(self, identity: IdentityContext) -> Dict[str, Any]:
        """
        Values offered by the recipient filter form, limited to the caller's
        contractor.
        """
        scope = AuthorizationGuard.tenant_scope(identity)
        accommodations = await self.accommodation_dao.list_options(scope)
        return {
            "statuses": await self.employee_dao.list_status_types(),
            "workplaces": await self.employee_dao.distinct_values(scope, Employee.workplace),
            "accommodations": accommodations,
            "positions": await self.employee_dao.distinct_values(scope, Employee.position),
            "countries": await self.employee_dao.distinct_values(
                scope, Employee.permanent_address_country
            ),
        }

    async def filter_recipients(
        self,
        identity: IdentityContext,
        criteria: Optional[Sequence[Any]] = None,
        today: Optional[date] = None,
    ) -> List[Employee]:
        """
        Employees in scope with an email address matching the criteria.

        Raises:
            FilterCriteriaError: If too many criteria are given
        """
        scope = AuthorizationGuard.tenant_scope(identity)
        return await self.employee_dao.find_recipients(scope, criteria, today=today)

    # =========================================================================
    # Sending
    # =========================================================================

    async def send_bulk(
        self,
        identity: IdentityContext,
        recipient_ids: Sequence[int],
        template_slug: Optional[str] = None,
        subject: Optional[str] = None,
        body: Optional[str] = None,
        variables: Optional[Dict[str, Any]] = None,
    ) -> BulkSendResult:
        """
        Render and send one message per recipient.

        WHAT: A stored template (when template_slug names an active one)
        replaces the given subject/body. The "general" template is itself a
        frame around the caller's subject and body, so it is first filled
        with {subject, body, **variables}. Each recipient then gets their
        own rendering with name, workplace, accommodation, visa_expiry and
        contract_end, overridden by caller variables.

        Args:
            identity: Caller
            recipient_ids: Employee IDs; out-of-scope or address-less ones
                are dropped
            template_slug: Stored template to use
            subject: Subject (when no template applies, or for "general")
            body: HTML body (likewise)
            variables: Extra placeholder values

        Returns:
            BulkSendResult with per-address errors

        Raises:
            ValidationError: No usable recipient, or no subject/body
            TemplateRenderError: Template syntax error
        """
        if not recipient_ids:
            raise ValidationError("No recipients selected")

        variables = dict(variables or {})
        scope = AuthorizationGuard.tenant_scope(identity)
        recipients = await self.employee_dao.get_recipients_by_ids(scope, recipient_ids)
        if not recipients:
            raise ValidationError("None of the selected recipients has an email address")

        email_subject, email_body = subject, body
        if template_slug:
            template = await self.template_dao.get_active_by_slug(template_slug)
            if template is not None:
                email_subject, email_body = template.subject, template.body_html

        if not email_subject or not email_body:
            raise ValidationError("Subject and body are required")

        if template_slug == GENERAL_TEMPLATE_SLUG:
            frame_vars = {
                key: value
                for key, value in {"subject": subject, "body": body, **variables}.items()
                if value is not None
            }
            email_subject = render_template(email_subject, frame_vars, html=False)
            email_body = render_template(email_body, frame_vars, html=False)

        result = BulkSendResult()
        for index, recipient in enumerate(recipients):
            if index and settings.BULK_SEND_DELAY_SECONDS > 0:
                await asyncio.sleep(settings.BULK_SEND_DELAY_SECONDS)

            personal_vars = {**recipient_variables(recipient), **variables}
            personal_subject = render_template(email_subject, personal_vars, html=False)
            personal_body = render_template(email_body, personal_vars)

            outcome = await self.provider.send(
                NotificationMessage(
                    to_email=recipient.email,
                    subject=personal_subject,
                    html_content=personal_body,
                )
            )

            if outcome.success:
                result.sent += 1
            else:
                result.failed += 1
                result.errors.append({"email": recipient.email, "error": outcome.error})
                logger.warning(f"Bulk send to {recipient.email} failed: {outcome.error}")

            await self.log_dao.log_email(
                to_email=recipient.email,
                subject=personal_subject,
                body=personal_body,
                status=EmailLogStatus.SENT if outcome.success else EmailLogStatus.FAILED,
                error_message=None if outcome.success else outcome.error,
            )

        logger.info(
            f"Bulk send by user {identity.user_id}: "
            f"{result.sent} sent, {result.failed} failed"
        )
        return result

    # =========================================================================
    # Delivery log
    # =========================================================================

    async def list_email_logs(
        self, identity: IdentityContext, page: int = 1, limit: int = 20
    ) -> tuple[List[EmailLog], int]:
        """
        Delivery log page.

        WHY: Log rows carry no contractor, so only the platform role may
        read them.

        Raises:
            InsufficientPermissionsError: For non-platform callers
        """
        if not identity.is_platform:
            raise InsufficientPermissionsError("Only platform administrators can read email logs")
        return await self.log_dao.list_recent(page, limit)
