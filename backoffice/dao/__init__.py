"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from backoffice.dao.base import BaseDAO
from backoffice.dao.user import UserDAO
from backoffice.dao.catalog import CatalogDAO
from backoffice.dao.ticket import (
    TicketDAO,
    TicketCommentDAO,
    TicketHistoryDAO,
    TicketAttachmentDAO,
    TICKET_FILTER_FIELDS,
)
from backoffice.dao.employee import EmployeeDAO, EMPLOYEE_FILTER_FIELDS
from backoffice.dao.accommodation import AccommodationDAO, ACCOMMODATION_FILTER_FIELDS
from backoffice.dao.notification import NotificationTemplateDAO, EmailLogDAO

__all__ = [
    "BaseDAO",
    "UserDAO",
    "CatalogDAO",
    "TicketDAO",
    "TicketCommentDAO",
    "TicketHistoryDAO",
    "TicketAttachmentDAO",
    "TICKET_FILTER_FIELDS",
    "EmployeeDAO",
    "EMPLOYEE_FILTER_FIELDS",
    "AccommodationDAO",
    "ACCOMMODATION_FILTER_FIELDS",
    "NotificationTemplateDAO",
    "EmailLogDAO",
]
