"""
Accommodation model.

WHAT: Company-managed housing units assigned to contractors.

WHY: is_active is the soft-delete flag; inactive units never appear in
listings. current_contractor_id is the tenant currently renting the unit
and is what the contractor scope filters on.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Integer, String, Text, Boolean, ForeignKey, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import Base, TimestampMixin


class AccommodationType(str, Enum):
    STUDIO = "studio"
    ONE_BEDROOM = "1br"
    TWO_BEDROOM = "2br"
    THREE_BEDROOM = "3br"
    DORMITORY = "dormitory"


class AccommodationStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class Accommodation(Base, TimestampMixin):
    """Housing unit."""

    __tablename__ = "accommodations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Stored as plain strings so the filter builder can compare slugs directly
    type: Mapped[str] = mapped_column(
        String(20), default=AccommodationType.STUDIO.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=AccommodationStatus.AVAILABLE.value, nullable=False
    )
    capacity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    current_contractor_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("contractors.id"), nullable=True
    )
    monthly_rent: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index("ix_accommodations_current_contractor_id", "current_contractor_id"),
        Index("ix_accommodations_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Accommodation(id={self.id}, name='{self.name}', status='{self.status}')>"
