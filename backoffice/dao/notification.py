"""
Notification template and email log DAOs.

WHAT: Template lookup for bulk mail and the per-recipient delivery log.

WHY: Every delivery attempt is recorded with the exact rendered content,
so failed sends can be audited and retried by hand.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.dao.base import BaseDAO
from backoffice.models.notification import NotificationTemplate, EmailLog


class NotificationTemplateDAO(BaseDAO[NotificationTemplate]):
    """
    Data Access Object for NotificationTemplate model.

    HOW: Extends BaseDAO with active-only lookups.
    """

    def __init__(self, session: AsyncSession):
        """Initialize NotificationTemplateDAO."""
        super().__init__(NotificationTemplate, session)

    async def list_active(self) -> List[NotificationTemplate]:
        result = await self.session.execute(
            select(NotificationTemplate)
            .where(NotificationTemplate.is_active.is_(True))
            .order_by(NotificationTemplate.name)
        )
        return list(result.scalars().all())

    async def get_active_by_slug(self, slug: str) -> Optional[NotificationTemplate]:
        """
        Get an active template by slug.

        Returns:
            Template or None when missing or deactivated
        """
        result = await self.session.execute(
            select(NotificationTemplate).where(
                NotificationTemplate.slug == slug,
                NotificationTemplate.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()


class EmailLogDAO(BaseDAO[EmailLog]):
    """Data Access Object for EmailLog model."""

    def __init__(self, session: AsyncSession):
        """Initialize EmailLogDAO."""
        super().__init__(EmailLog, session)

    async def log_email(
        self,
        to_email: str,
        subject: str,
        body: str,
        status: str,
        error_message: Optional[str] = None,
    ) -> EmailLog:
        """
        Log one delivery attempt.

        Args:
            to_email: Recipient email
            subject: Rendered subject
            body: Rendered body
            status: EmailLogStatus value
            error_message: Provider error when the attempt failed

        Returns:
            Created EmailLog record
        """
        return await self.create(
            to_email=to_email,
            subject=subject,
            body=body,
            status=status,
            error_message=error_message,
        )

    async def list_for_recipient(self, to_email: str) -> List[EmailLog]:
        result = await self.session.execute(
            select(EmailLog)
            .where(EmailLog.to_email == to_email)
            .order_by(EmailLog.sent_at.desc(), EmailLog.id.desc())
        )
        return list(result.scalars().all())

    async def list_recent(self, page: int, limit: int):
        """Delivery log page, newest first, with the total count."""
        query = select(EmailLog).order_by(EmailLog.sent_at.desc(), EmailLog.id.desc())
        return await self.paginate(query, page, limit)
