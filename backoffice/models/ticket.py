"""
Ticket models for the support ticket lifecycle.

WHAT: SQLAlchemy models for tickets, their catalogs (status, priority,
category) and the append-only records attached to a ticket (comments,
attachments, history rows).

WHY: Tickets are the only entity here with real lifecycle invariants:
1. contractor_id never changes after creation
2. closed_at is set exactly while the status is terminal
3. Comments and history rows are written once and never modified

HOW: Uses SQLAlchemy 2.0 typed mappings with:
- Catalog tables instead of enums, so statuses carry color, order and a
  terminal flag
- Foreign keys to contractors and users for tenant scoping
- Indexes matching the list endpoint's filters
"""

from datetime import date, datetime
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import (
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from backoffice.models.base import Base, utcnow

if TYPE_CHECKING:
    from backoffice.models.contractor import Contractor
    from backoffice.models.user import User


# ============================================================================
# Catalog seeds
# ============================================================================

# (name, slug, color, is_final, order_index)
DEFAULT_TICKET_STATUSES = [
    ("New", "new", "#2196f3", False, 1),
    ("In progress", "in_progress", "#ff9800", False, 2),
    ("Waiting for material", "waiting_material", "#ffc107", False, 3),
    ("Invoicing", "invoicing", "#03a9f4", False, 4),
    ("Payment pending", "payment_pending", "#ffb300", False, 5),
    ("Waiting", "waiting", "#9e9e9e", False, 6),
    ("Transferred", "transferred", "#00bcd4", False, 7),
    ("Completed", "completed", "#4caf50", True, 8),
    ("Rejected", "rejected", "#f44336", True, 9),
    ("Not feasible", "not_feasible", "#607d8b", True, 10),
]

INITIAL_STATUS_SLUG = "new"
RESOLVED_STATUS_SLUG = "completed"

# (name, slug, level, color)
DEFAULT_PRIORITIES = [
    ("Low", "low", 1, "#4caf50"),
    ("Normal", "normal", 2, "#2196f3"),
    ("Urgent", "urgent", 3, "#ff9800"),
    ("Critical", "critical", 4, "#f44336"),
]

# Priority level at or above which a ticket counts as urgent
URGENT_PRIORITY_LEVEL = 3

# (name, slug, icon, color) seeded as shared categories (contractor_id NULL)
DEFAULT_CATEGORIES = [
    ("HR", "hr", "people", "#9c27b0"),
    ("Technical", "technical", "build", "#ff5722"),
    ("Finance", "finance", "payments", "#4caf50"),
    ("General", "general", "help", "#607d8b"),
]


# ============================================================================
# History actions
# ============================================================================

HISTORY_ACTION_CREATED = "created"
HISTORY_ACTION_STATUS_CHANGED = "status_changed"


# ============================================================================
# Catalog Models
# ============================================================================


class TicketStatus(Base):
    """
    Ticket status catalog entry.

    WHAT: One state of the ticket lifecycle.

    WHY: is_final marks terminal statuses; reaching one sets closed_at.
    The catalog is seeded by migration and not editable through the API.
    """

    __tablename__ = "ticket_statuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_final: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<TicketStatus(slug='{self.slug}', is_final={self.is_final})>"


class Priority(Base):
    """
    Ticket priority catalog entry.

    WHY: level orders priorities; level >= URGENT_PRIORITY_LEVEL is what
    the list endpoint's urgent flag selects.
    """

    __tablename__ = "priorities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<Priority(slug='{self.slug}', level={self.level})>"


class TicketCategory(Base):
    """
    Ticket category.

    WHY: Categories are per contractor (contractor_id NULL means shared by
    all contractors), so two tenants can both have a "technical" category.
    """

    __tablename__ = "ticket_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contractor_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("contractors.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    __table_args__ = (
        UniqueConstraint("slug", "contractor_id", name="uq_ticket_categories_slug_contractor"),
    )

    def __repr__(self) -> str:
        return f"<TicketCategory(slug='{self.slug}', contractor_id={self.contractor_id})>"


# ============================================================================
# Ticket Model
# ============================================================================


class Ticket(Base):
    """
    Support ticket raised inside a contractor.

    WHAT: A request with a human-readable number ("#12"), moved through the
    status catalog by administrators or its assignee.

    WHY: Tickets are never deleted; a terminal status is the closure
    mechanism, and the history rows make the lifecycle replayable.

    Security: contractor-scoped, assignee-scoped for external assignees.
    """

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    # Tenant (immutable after creation)
    contractor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contractors.id"), nullable=False
    )

    # Ticket details
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Classification
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("ticket_categories.id"), nullable=True
    )
    priority_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("priorities.id"), nullable=True
    )
    status_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ticket_statuses.id"), nullable=False
    )

    # People
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    assigned_to: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    # Timestamps
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    contractor: Mapped["Contractor"] = relationship("Contractor")
    category: Mapped[Optional["TicketCategory"]] = relationship("TicketCategory")
    priority: Mapped[Optional["Priority"]] = relationship("Priority")
    status: Mapped["TicketStatus"] = relationship("TicketStatus")
    creator: Mapped["User"] = relationship("User", foreign_keys=[created_by])
    assignee: Mapped[Optional["User"]] = relationship("User", foreign_keys=[assigned_to])
    attachments: Mapped[List["TicketAttachment"]] = relationship(
        "TicketAttachment", back_populates="ticket"
    )

    # Indexes for common queries
    __table_args__ = (
        Index("ix_tickets_contractor_id", "contractor_id"),
        Index("ix_tickets_status_id", "status_id"),
        Index("ix_tickets_priority_id", "priority_id"),
        Index("ix_tickets_assigned_to", "assigned_to"),
        Index("ix_tickets_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, number='{self.ticket_number}', title='{self.title[:30]}')>"


# ============================================================================
# TicketComment Model
# ============================================================================


class TicketComment(Base):
    """
    Comment on a ticket.

    WHY: Comments are immutable once written; there is no updated_at.
    is_internal comments are hidden from external assignees.
    """

    __tablename__ = "ticket_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    # Relationships
    author: Mapped["User"] = relationship("User")

    __table_args__ = (
        Index("ix_ticket_comments_ticket_id", "ticket_id"),
        Index("ix_ticket_comments_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<TicketComment(id={self.id}, ticket_id={self.ticket_id}, is_internal={self.is_internal})>"


# ============================================================================
# TicketAttachment Model
# ============================================================================


class TicketAttachment(Base):
    """
    File attached to a ticket. Upload handling lives outside this service;
    rows are only listed on the ticket detail.
    """

    __tablename__ = "ticket_attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id"), nullable=False
    )
    uploaded_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    ticket: Mapped["Ticket"] = relationship("Ticket", back_populates="attachments")

    __table_args__ = (
        Index("ix_ticket_attachments_ticket_id", "ticket_id"),
    )

    def __repr__(self) -> str:
        return f"<TicketAttachment(id={self.id}, file_name='{self.file_name}')>"


# ============================================================================
# TicketHistory Model
# ============================================================================


class TicketHistory(Base):
    """
    Immutable record of one fact in a ticket's lifecycle.

    WHAT: action is "created" or "status_changed"; field_name, old_value and
    new_value describe the change in display form (status names, title).

    WHY: Rows are appended in the same transaction as the change they
    describe and never updated or deleted.
    """

    __tablename__ = "ticket_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id"), nullable=False
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    field_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    old_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    user: Mapped[Optional["User"]] = relationship("User")

    __table_args__ = (
        Index("ix_ticket_history_ticket_id", "ticket_id"),
        Index("ix_ticket_history_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<TicketHistory(id={self.id}, ticket_id={self.ticket_id}, action='{self.action}')>"
