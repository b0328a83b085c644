"""
Contractor model.

WHY: A contractor is a tenant company. Tickets, employees and ticket
categories carry its id, and every non-platform query is scoped to the
caller's contractor.
"""

from sqlalchemy import Column, String, Boolean

from backoffice.models.base import Base, TimestampMixin, PrimaryKeyMixin


class Contractor(Base, PrimaryKeyMixin, TimestampMixin):
    """
    Tenant company in the multi-tenant system.

    WHY: contractor_id is the isolation key for tickets, employees and
    categories; is_active allows retiring a tenant without losing its history.
    """

    __tablename__ = "contractors"

    name = Column(String(255), nullable=False, index=True)
    slug = Column(String(100), nullable=False, unique=True)

    # Contact details
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Contractor(id={self.id}, slug='{self.slug}')>"
