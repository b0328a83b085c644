"""
Notification template and delivery log models.

WHAT: Stored message templates for bulk mail and one log row per
delivery attempt.

WHY: Templates let administrators reuse wording; the log records what each
recipient actually received after interpolation, and whether it failed.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, Text, Boolean, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import Base, TimestampMixin, utcnow


# Template slug whose subject/body are themselves filled from the request
GENERAL_TEMPLATE_SLUG = "general"


class NotificationTemplate(Base, TimestampMixin):
    """Reusable subject/body pair with {{ variable }} placeholders."""

    __tablename__ = "notification_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body_html: Mapped[str] = mapped_column(Text, nullable=False)
    event_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    language: Mapped[str] = mapped_column(String(10), default="en", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class EmailLogStatus:
    SENT = "sent"
    FAILED = "failed"


class EmailLog(Base):
    """One delivery attempt with the rendered subject and body."""

    __tablename__ = "email_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    to_email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_email_logs_sent_at", "sent_at"),
    )
