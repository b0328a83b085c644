"""
User and role models.

WHY: Users belong to one contractor (or none, for platform operators) and
hold any number of roles. The role slugs drive every authorization decision
made by AuthorizationGuard.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, Table, Text
from sqlalchemy.orm import relationship

from backoffice.models.base import Base, TimestampMixin, PrimaryKeyMixin


# Association table between users and roles
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base, PrimaryKeyMixin):
    """
    Role catalog entry.

    WHY: Roles are data rather than an enum because a user can hold several
    at once (e.g. admin and task_owner).
    """

    __tablename__ = "roles"

    name = Column(String(100), nullable=False)
    slug = Column(String(50), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_system = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Role(slug='{self.slug}')>"


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """
    User model representing individuals who use the back office.

    WHY: contractor_id is nullable only for platform operators; for everyone
    else it is the tenant their requests are confined to.
    """

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)

    # Multi-tenancy
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=True, index=True)

    # Account status
    # WHY: is_active allows disabling users without losing ticket authorship
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    # WHY: selectin loading keeps role lookups usable in async sessions,
    # where lazy loading on attribute access is not allowed.
    contractor = relationship("Contractor", lazy="selectin")
    roles = relationship("Role", secondary=user_roles, lazy="selectin")

    @property
    def full_name(self) -> str:
        """Display name shown as comment and ticket author."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def role_slugs(self) -> list[str]:
        return [role.slug for role in self.roles]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
