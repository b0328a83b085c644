"""
Employee models.

WHAT: Employees of a contractor, with the personal, visa and contract
dates that the employee list and bulk-notification filters work on.

WHY: Employees are tenant data: every query goes through the contractor
scope computed by AuthorizationGuard.
"""

from datetime import date
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Integer, String, Text, Date, ForeignKey, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column

from backoffice.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from backoffice.models.accommodation import Accommodation
    from backoffice.models.user import User


# (name, slug, color) seeded by the initial migration
DEFAULT_EMPLOYEE_STATUSES = [
    ("Active", "active", "#4caf50"),
    ("On leave", "on_leave", "#ff9800"),
    ("Suspended", "suspended", "#f44336"),
    ("Left", "left", "#9e9e9e"),
]


class EmployeeStatusType(Base):
    """Employment status catalog entry."""

    __tablename__ = "employee_status_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)


class Employee(Base, TimestampMixin):
    """
    Employee of a contractor.

    WHY: end_date doubles as the contract end date, which is what the
    contract_end filter presets compare against.
    """

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contractor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contractors.id"), nullable=False
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    employee_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Personal data
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    company_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    marital_status: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    permanent_address_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Employment
    position: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    workplace: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    visa_expiry: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("employee_status_types.id"), nullable=True
    )
    accommodation_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("accommodations.id"), nullable=True
    )

    # Relationships
    user: Mapped[Optional["User"]] = relationship("User")
    status: Mapped[Optional["EmployeeStatusType"]] = relationship("EmployeeStatusType")
    accommodation: Mapped[Optional["Accommodation"]] = relationship("Accommodation")

    __table_args__ = (
        Index("ix_employees_contractor_id", "contractor_id"),
        Index("ix_employees_visa_expiry", "visa_expiry"),
        Index("ix_employees_end_date", "end_date"),
    )

    @property
    def full_name(self) -> str:
        """Family name first; blank records use the linked user's name."""
        name = f"{self.last_name or ''} {self.first_name or ''}".strip()
        if not name and self.user is not None:
            name = f"{self.user.last_name} {self.user.first_name}".strip()
        return name

    @property
    def email(self) -> Optional[str]:
        """Company address, falling back to the linked user's login email."""
        if self.company_email:
            return self.company_email
        if self.user is not None:
            return self.user.email
        return None

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, name='{self.full_name}')>"
