"""
Test factories for creating test data.

WHY: Factories provide a consistent, reusable way to create test objects,
reducing duplication and making tests more maintainable. Every factory
commits, so the rows survive a request that is rolled back.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.auth import create_access_token
from backoffice.core.identity import DEFAULT_ROLES
from backoffice.dao.ticket import TicketDAO
from backoffice.dao.user import UserDAO
from backoffice.models.accommodation import Accommodation
from backoffice.models.contractor import Contractor
from backoffice.models.employee import Employee, EmployeeStatusType, DEFAULT_EMPLOYEE_STATUSES
from backoffice.models.notification import NotificationTemplate
from backoffice.models.ticket import (
    Ticket,
    TicketStatus,
    Priority,
    TicketCategory,
    TicketAttachment,
    DEFAULT_TICKET_STATUSES,
    DEFAULT_PRIORITIES,
    DEFAULT_CATEGORIES,
)
from backoffice.models.user import Role, User


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header for a factory-created user."""
    token = create_access_token({"user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


@dataclass
class SeededCatalog:
    """Catalog rows keyed by slug."""

    statuses: Dict[str, TicketStatus] = field(default_factory=dict)
    priorities: Dict[str, Priority] = field(default_factory=dict)
    categories: Dict[str, TicketCategory] = field(default_factory=dict)
    employee_statuses: Dict[str, EmployeeStatusType] = field(default_factory=dict)
    roles: Dict[str, Role] = field(default_factory=dict)


class CatalogFactory:
    """
    Seeds the catalogs the initial migration provides.
    """

    @staticmethod
    async def seed(session: AsyncSession) -> SeededCatalog:
        catalog = SeededCatalog()

        for name, slug, color, is_final, order_index in DEFAULT_TICKET_STATUSES:
            catalog.statuses[slug] = TicketStatus(
                name=name, slug=slug, color=color, is_final=is_final, order_index=order_index
            )
        for name, slug, level, color in DEFAULT_PRIORITIES:
            catalog.priorities[slug] = Priority(name=name, slug=slug, level=level, color=color)
        for name, slug, icon, color in DEFAULT_CATEGORIES:
            catalog.categories[slug] = TicketCategory(
                contractor_id=None, name=name, slug=slug, icon=icon, color=color
            )
        for name, slug, color in DEFAULT_EMPLOYEE_STATUSES:
            catalog.employee_statuses[slug] = EmployeeStatusType(name=name, slug=slug, color=color)

        session.add_all(catalog.statuses.values())
        session.add_all(catalog.priorities.values())
        session.add_all(catalog.categories.values())
        session.add_all(catalog.employee_statuses.values())
        await session.commit()

        for role in await RoleFactory.ensure(session, [slug for _, slug, _ in DEFAULT_ROLES]):
            catalog.roles[role.slug] = role
        return catalog


class RoleFactory:
    """Creates roles on demand so users can be built without the catalog fixture."""

    @staticmethod
    async def ensure(session: AsyncSession, slugs: Iterable[str]) -> list:
        slugs = list(slugs)
        existing = {role.slug: role for role in await UserDAO(session).get_roles_by_slug(slugs)}
        names = {slug: name for name, slug, _ in DEFAULT_ROLES}

        for slug in slugs:
            if slug not in existing:
                role = Role(name=names.get(slug, slug.title()), slug=slug)
                session.add(role)
                existing[slug] = role
        await session.commit()
        return [existing[slug] for slug in slugs]


class ContractorFactory:
    """Factory for tenant companies."""

    _counter = 0

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        name: Optional[str] = None,
        slug: Optional[str] = None,
    ) -> Contractor:
        cls._counter += 1
        name = name or f"Contractor {cls._counter}"
        contractor = Contractor(
            name=name,
            slug=slug or f"{name.lower().replace(' ', '-')}-{cls._counter}",
            is_active=True,
        )
        session.add(contractor)
        await session.commit()
        await session.refresh(contractor)
        return contractor


class UserFactory:
    """
    Factory for users with role slugs.

    WHY: Authorization depends only on (contractor_id, roles), so tests
    pick the role set directly.
    """

    _counter = 0

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        contractor: Optional[Contractor] = None,
        roles: Iterable[str] = ("user",),
        email: Optional[str] = None,
        first_name: str = "Test",
        last_name: str = "User",
        is_active: bool = True,
    ) -> User:
        cls._counter += 1
        role_rows = await RoleFactory.ensure(session, roles)
        user = User(
            email=email or f"user{cls._counter}@example.com",
            first_name=first_name,
            last_name=last_name,
            contractor_id=contractor.id if contractor else None,
            is_active=is_active,
            roles=role_rows,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    @classmethod
    async def create_admin(cls, session: AsyncSession, contractor: Contractor, **kwargs) -> User:
        return await cls.create(session, contractor=contractor, roles=("admin",), **kwargs)

    @classmethod
    async def create_superadmin(cls, session: AsyncSession, **kwargs) -> User:
        return await cls.create(session, contractor=None, roles=("superadmin",), **kwargs)


class TicketFactory:
    """Factory for tickets created directly, bypassing the lifecycle service."""

    @staticmethod
    async def create(
        session: AsyncSession,
        contractor: Contractor,
        creator: User,
        status: TicketStatus,
        title: str = "Test ticket",
        description: Optional[str] = None,
        priority: Optional[Priority] = None,
        category: Optional[TicketCategory] = None,
        assignee: Optional[User] = None,
        created_at: Optional[datetime] = None,
    ) -> Ticket:
        ticket_number = await TicketDAO(session).next_ticket_number()
        ticket = Ticket(
            ticket_number=ticket_number,
            contractor_id=contractor.id,
            title=title,
            description=description,
            status_id=status.id,
            priority_id=priority.id if priority else None,
            category_id=category.id if category else None,
            created_by=creator.id,
            assigned_to=assignee.id if assignee else None,
        )
        if created_at is not None:
            ticket.created_at = created_at
            ticket.updated_at = created_at
        session.add(ticket)
        await session.commit()
        await session.refresh(ticket)
        return ticket

    @staticmethod
    async def attach(session: AsyncSession, ticket: Ticket, file_name: str = "photo.jpg") -> TicketAttachment:
        attachment = TicketAttachment(
            ticket_id=ticket.id,
            file_name=file_name,
            file_path=f"/uploads/{ticket.id}/{file_name}",
            file_size=1024,
            mime_type="image/jpeg",
        )
        session.add(attachment)
        await session.commit()
        await session.refresh(attachment)
        return attachment


class EmployeeFactory:
    """Factory for employees; extra keyword arguments set model columns."""

    @staticmethod
    async def create(
        session: AsyncSession,
        contractor: Contractor,
        first_name: str = "Anna",
        last_name: str = "Kovacs",
        company_email: Optional[str] = None,
        status: Optional[EmployeeStatusType] = None,
        accommodation: Optional[Accommodation] = None,
        user: Optional[User] = None,
        **columns,
    ) -> Employee:
        employee = Employee(
            contractor_id=contractor.id,
            first_name=first_name,
            last_name=last_name,
            company_email=company_email,
            status_id=status.id if status else None,
            accommodation_id=accommodation.id if accommodation else None,
            user_id=user.id if user else None,
            **columns,
        )
        session.add(employee)
        await session.commit()
        await session.refresh(employee)
        return employee


class AccommodationFactory:
    """Factory for housing units."""

    @staticmethod
    async def create(
        session: AsyncSession,
        contractor: Optional[Contractor] = None,
        name: str = "Unit A1",
        address: Optional[str] = None,
        type: str = "studio",
        status: str = "available",
        capacity: int = 2,
        monthly_rent: Optional[Decimal] = None,
        is_active: bool = True,
    ) -> Accommodation:
        accommodation = Accommodation(
            name=name,
            address=address,
            type=type,
            status=status,
            capacity=capacity,
            current_contractor_id=contractor.id if contractor else None,
            monthly_rent=monthly_rent,
            is_active=is_active,
        )
        session.add(accommodation)
        await session.commit()
        await session.refresh(accommodation)
        return accommodation


class TemplateFactory:
    """Factory for notification templates."""

    @staticmethod
    async def create(
        session: AsyncSession,
        slug: str = "visa_reminder",
        name: str = "Visa reminder",
        subject: str = "Visa expiry for {{ name }}",
        body_html: str = "<p>Dear {{ name }}, your visa expires on {{ visa_expiry }}.</p>",
        is_active: bool = True,
    ) -> NotificationTemplate:
        template = NotificationTemplate(
            slug=slug,
            name=name,
            subject=subject,
            body_html=body_html,
            language="en",
            is_active=is_active,
        )
        session.add(template)
        await session.commit()
        await session.refresh(template)
        return template

    @staticmethod
    async def create_general(session: AsyncSession) -> NotificationTemplate:
        return await TemplateFactory.create(
            session,
            slug="general",
            name="General message",
            subject="{{ subject }}",
            body_html="<p>Dear {{ name }},</p>\n{{ body }}",
        )
