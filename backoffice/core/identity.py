"""
Resolved caller identity and role catalog.

WHAT: IdentityContext is the (user_id, contractor_id, roles) triple every
service call receives explicitly.

WHY: Services and the authorization guard take the identity as an argument
instead of reading it from the request, so they can be exercised in unit
tests with a hand-built identity and no HTTP layer.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional


# ============================================================================
# Role slugs
# ============================================================================

ROLE_SUPERADMIN = "superadmin"
ROLE_DATA_CONTROLLER = "data_controller"
ROLE_ADMIN = "admin"
ROLE_TASK_OWNER = "task_owner"
ROLE_USER = "user"
ROLE_CONTRACTOR = "contractor"
ROLE_ACCOMMODATED_EMPLOYEE = "accommodated_employee"

# Platform-wide role: sees every contractor's data
PLATFORM_ROLES: FrozenSet[str] = frozenset({ROLE_SUPERADMIN})

# Roles allowed on administrative endpoints (employees, housing, bulk mail)
ADMIN_ROLES: FrozenSet[str] = frozenset({ROLE_SUPERADMIN, ROLE_DATA_CONTROLLER, ROLE_ADMIN})

# Roles that may change any in-scope ticket's status
TRANSITION_ROLES: FrozenSet[str] = frozenset({ROLE_SUPERADMIN, ROLE_ADMIN})

# External assignee: limited to tickets delegated to them
ASSIGNEE_SCOPED_ROLES: FrozenSet[str] = frozenset({ROLE_CONTRACTOR})

# (name, slug, description) seeded by the initial migration
DEFAULT_ROLES = [
    ("Super Admin", ROLE_SUPERADMIN, "Platform operator with access to every contractor"),
    ("Data Controller", ROLE_DATA_CONTROLLER, "Manages personal data for a contractor"),
    ("Admin", ROLE_ADMIN, "Contractor administrator"),
    ("Task Owner", ROLE_TASK_OWNER, "Owns and follows up tickets"),
    ("User", ROLE_USER, "Regular contractor user"),
    ("Contractor", ROLE_CONTRACTOR, "External assignee working on delegated tickets"),
    ("Accommodated Employee", ROLE_ACCOMMODATED_EMPLOYEE, "Employee living in company housing"),
]


@dataclass(frozen=True)
class IdentityContext:
    """
    Identity of the caller for one request.

    contractor_id is None only for platform users.
    """

    user_id: int
    contractor_id: Optional[int]
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        user_id: int,
        contractor_id: Optional[int],
        roles: Iterable[str],
    ) -> "IdentityContext":
        return cls(user_id=user_id, contractor_id=contractor_id, roles=frozenset(roles))

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return not self.roles.isdisjoint(roles)

    @property
    def is_platform(self) -> bool:
        return self.has_any_role(PLATFORM_ROLES)

    @property
    def is_admin(self) -> bool:
        return self.has_any_role(ADMIN_ROLES)

    @property
    def is_assignee_scoped(self) -> bool:
        return self.has_any_role(ASSIGNEE_SCOPED_ROLES)
