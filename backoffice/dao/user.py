"""
User Data Access Object.

WHY: UserDAO provides database operations for User model, following
the DAO pattern for separation of concerns and testability.
"""

from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.dao.base import BaseDAO
from backoffice.models.user import User, Role


class UserDAO(BaseDAO[User]):
    """
    Data Access Object for User model.

    WHY: Identity resolution and assignee validation both go through here.
    Roles are loaded eagerly by the relationship itself (lazy="selectin").
    """

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        WHY: Case-insensitive comparison prevents duplicate accounts with
        different casing (user@example.com vs USER@EXAMPLE.COM).

        Example:
            >>> user = await user_dao.get_by_email("admin@example.com")
            >>> user.email
            'admin@example.com'
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_active(self, user_id: int) -> Optional[User]:
        """
        Retrieve an active user by ID.

        WHY: Deactivated accounts keep valid-looking tokens until expiry;
        identity resolution must treat them as unknown.
        """
        result = await self.session.execute(
            select(User).where(User.id == user_id, User.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_roles_by_slug(self, slugs: List[str]) -> List[Role]:
        """Look up role rows by slug (unknown slugs are ignored)."""
        if not slugs:
            return []
        result = await self.session.execute(select(Role).where(Role.slug.in_(slugs)))
        return list(result.scalars().all())
