"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from backoffice.models.base import Base, TimestampMixin, PrimaryKeyMixin, utcnow
from backoffice.models.contractor import Contractor
from backoffice.models.user import User, Role, user_roles
from backoffice.models.ticket import (
    Ticket,
    TicketStatus,
    Priority,
    TicketCategory,
    TicketComment,
    TicketAttachment,
    TicketHistory,
)
from backoffice.models.accommodation import (
    Accommodation,
    AccommodationType,
    AccommodationStatus,
)
from backoffice.models.employee import Employee, EmployeeStatusType
from backoffice.models.notification import NotificationTemplate, EmailLog

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "utcnow",
    "Contractor",
    "User",
    "Role",
    "user_roles",
    "Ticket",
    "TicketStatus",
    "Priority",
    "TicketCategory",
    "TicketComment",
    "TicketAttachment",
    "TicketHistory",
    "Accommodation",
    "AccommodationType",
    "AccommodationStatus",
    "Employee",
    "EmployeeStatusType",
    "NotificationTemplate",
    "EmailLog",
]
