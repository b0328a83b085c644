"""Initial schema - tenants, tickets, workforce and notifications

Revision ID: 001
Revises:
Create Date: 2026-10-19

WHAT: Creates every table of the back office and seeds the catalogs the
application expects to exist (roles, ticket statuses, priorities, shared
ticket categories, employee statuses and the "general" mail template).

WHY: Ticket creation looks up the "new" status by slug and the urgent
filter relies on priority levels, so the catalogs are part of the schema
rather than fixtures.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from backoffice.core.identity import DEFAULT_ROLES
from backoffice.models.employee import DEFAULT_EMPLOYEE_STATUSES
from backoffice.models.ticket import (
    DEFAULT_TICKET_STATUSES,
    DEFAULT_PRIORITIES,
    DEFAULT_CATEGORIES,
)


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


GENERAL_TEMPLATE = {
    "slug": "general",
    "name": "General message",
    "subject": "{{ subject }}",
    "body_html": "<p>Dear {{ name }},</p>\n{{ body }}",
    "event_type": None,
    "language": "en",
    "is_active": True,
}


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """
    Create tables and seed catalogs.

    Creates:
    - contractors, roles, users, user_roles: tenants and identities
    - ticket_statuses, priorities, ticket_categories: ticket catalogs
    - tickets, ticket_comments, ticket_attachments, ticket_history
    - employee_status_types, accommodations, employees
    - notification_templates, email_logs
    """
    # ------------------------------------------------------------------
    # Tenants and identities
    # ------------------------------------------------------------------
    contractors = op.create_table(
        "contractors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_contractors_id", "contractors", ["id"])
    op.create_index("ix_contractors_name", "contractors", ["name"])

    roles = op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_roles_id", "roles", ["id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("contractor_id", sa.Integer(), sa.ForeignKey("contractors.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_contractor_id", "users", ["contractor_id"])

    op.create_table(
        "user_roles",
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "role_id", sa.Integer(),
            sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True,
        ),
    )

    # ------------------------------------------------------------------
    # Ticket catalogs
    # ------------------------------------------------------------------
    ticket_statuses = op.create_table(
        "ticket_statuses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("is_final", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
    )

    priorities = op.create_table(
        "priorities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False, unique=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(20), nullable=True),
    )

    ticket_categories = op.create_table(
        "ticket_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("contractor_id", sa.Integer(), sa.ForeignKey("contractors.id"), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.UniqueConstraint("slug", "contractor_id", name="uq_ticket_categories_slug_contractor"),
    )

    # ------------------------------------------------------------------
    # Tickets and their append-only records
    # ------------------------------------------------------------------
    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ticket_number", sa.String(20), nullable=False, unique=True),
        sa.Column("contractor_id", sa.Integer(), sa.ForeignKey("contractors.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("ticket_categories.id"), nullable=True),
        sa.Column("priority_id", sa.Integer(), sa.ForeignKey("priorities.id"), nullable=True),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("ticket_statuses.id"), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_to", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_tickets_contractor_id", "tickets", ["contractor_id"])
    op.create_index("ix_tickets_status_id", "tickets", ["status_id"])
    op.create_index("ix_tickets_priority_id", "tickets", ["priority_id"])
    op.create_index("ix_tickets_assigned_to", "tickets", ["assigned_to"])
    op.create_index("ix_tickets_created_at", "tickets", ["created_at"])

    op.create_table(
        "ticket_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ticket_comments_ticket_id", "ticket_comments", ["ticket_id"])
    op.create_index("ix_ticket_comments_created_at", "ticket_comments", ["created_at"])

    op.create_table(
        "ticket_attachments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ticket_attachments_ticket_id", "ticket_attachments", ["ticket_id"])

    op.create_table(
        "ticket_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("field_name", sa.String(100), nullable=True),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ticket_history_ticket_id", "ticket_history", ["ticket_id"])
    op.create_index("ix_ticket_history_created_at", "ticket_history", ["created_at"])

    # ------------------------------------------------------------------
    # Workforce
    # ------------------------------------------------------------------
    employee_status_types = op.create_table(
        "employee_status_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
    )

    op.create_table(
        "accommodations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("type", sa.String(20), nullable=False, server_default="studio"),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "current_contractor_id", sa.Integer(),
            sa.ForeignKey("contractors.id"), nullable=True,
        ),
        sa.Column("monthly_rent", sa.Numeric(10, 2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index(
        "ix_accommodations_current_contractor_id", "accommodations", ["current_contractor_id"]
    )
    op.create_index("ix_accommodations_status", "accommodations", ["status"])

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("contractor_id", sa.Integer(), sa.ForeignKey("contractors.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("employee_number", sa.String(50), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("company_email", sa.String(255), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("marital_status", sa.String(30), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("permanent_address_country", sa.String(100), nullable=True),
        sa.Column("position", sa.String(100), nullable=True),
        sa.Column("workplace", sa.String(255), nullable=True),
        sa.Column("visa_expiry", sa.Date(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column(
            "status_id", sa.Integer(),
            sa.ForeignKey("employee_status_types.id"), nullable=True,
        ),
        sa.Column(
            "accommodation_id", sa.Integer(),
            sa.ForeignKey("accommodations.id"), nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_employees_contractor_id", "employees", ["contractor_id"])
    op.create_index("ix_employees_visa_expiry", "employees", ["visa_expiry"])
    op.create_index("ix_employees_end_date", "employees", ["end_date"])

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    notification_templates = op.create_table(
        "notification_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("body_html", sa.Text(), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=True),
        sa.Column("language", sa.String(10), nullable=False, server_default="en"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "email_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("to_email", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_email_logs_sent_at", "email_logs", ["sent_at"])

    # ------------------------------------------------------------------
    # Seed data
    # ------------------------------------------------------------------
    op.bulk_insert(
        roles,
        [
            {"name": name, "slug": slug, "description": description, "is_system": True}
            for name, slug, description in DEFAULT_ROLES
        ],
    )
    op.bulk_insert(
        ticket_statuses,
        [
            {"name": name, "slug": slug, "color": color, "is_final": is_final, "order_index": order}
            for name, slug, color, is_final, order in DEFAULT_TICKET_STATUSES
        ],
    )
    op.bulk_insert(
        priorities,
        [
            {"name": name, "slug": slug, "level": level, "color": color}
            for name, slug, level, color in DEFAULT_PRIORITIES
        ],
    )
    op.bulk_insert(
        ticket_categories,
        [
            {"contractor_id": None, "name": name, "slug": slug, "icon": icon, "color": color}
            for name, slug, icon, color in DEFAULT_CATEGORIES
        ],
    )
    op.bulk_insert(
        employee_status_types,
        [
            {"name": name, "slug": slug, "color": color}
            for name, slug, color in DEFAULT_EMPLOYEE_STATUSES
        ],
    )
    op.bulk_insert(notification_templates, [GENERAL_TEMPLATE])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("email_logs")
    op.drop_table("notification_templates")
    op.drop_table("employees")
    op.drop_table("accommodations")
    op.drop_table("employee_status_types")
    op.drop_table("ticket_history")
    op.drop_table("ticket_attachments")
    op.drop_table("ticket_comments")
    op.drop_table("tickets")
    op.drop_table("ticket_categories")
    op.drop_table("priorities")
    op.drop_table("ticket_statuses")
    op.drop_table("user_roles")
    op.drop_table("users")
    op.drop_table("roles")
    op.drop_table("contractors")
