"""
Authorization guard for tenant and role scoping.

WHAT: Pure decision functions over an IdentityContext and a target.
Reads get a mandatory scope (rendered into SQL by the DAOs); writes get
a yes/no answer.

WHY: Every role rule lives here so routes and services call one policy
function instead of re-deriving scope inline:
1. Platform role: unrestricted
2. Everyone else: confined to their own contractor
3. External assignees: additionally confined to tickets assigned to them
4. Status transitions: platform role, administrative role or the assignee
5. Comments: contractor scope only, assignment not required

HOW: No I/O. ReadScope is a small value object the DAOs turn into WHERE
conditions and the services use to check single rows already loaded.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import false

from backoffice.core.identity import IdentityContext, TRANSITION_ROLES


@dataclass(frozen=True)
class ReadScope:
    """
    Mandatory restriction on which rows a caller may see.

    None on a field means "no restriction on that column".
    """

    contractor_id: Optional[int] = None
    assigned_to: Optional[int] = None
    deny_all: bool = False

    @property
    def is_unrestricted(self) -> bool:
        return not self.deny_all and self.contractor_id is None and self.assigned_to is None

    def conditions(self, contractor_column: Any, assignee_column: Any = None) -> List[Any]:
        """
        SQL conditions enforcing this scope.

        Args:
            contractor_column: Column holding the owning contractor id
            assignee_column: Column holding the assignee id (tickets only)

        Returns:
            List of conditions to AND into the query
        """
        if self.deny_all:
            return [false()]

        conditions = []
        if self.contractor_id is not None:
            conditions.append(contractor_column == self.contractor_id)
        if self.assigned_to is not None and assignee_column is not None:
            conditions.append(assignee_column == self.assigned_to)
        return conditions

    def permits(self, contractor_id: Optional[int], assigned_to: Optional[int] = None) -> bool:
        """Whether a single already-loaded row falls inside the scope."""
        if self.deny_all:
            return False
        if self.contractor_id is not None and contractor_id != self.contractor_id:
            return False
        if self.assigned_to is not None and assigned_to != self.assigned_to:
            return False
        return True


# A non-platform caller without a contractor can see nothing
_DENY_ALL = ReadScope(deny_all=True)


class AuthorizationGuard:
    """
    Tenant and role policy.

    Example:
        scope = AuthorizationGuard.ticket_scope(identity)
        query = query.where(*scope.conditions(Ticket.contractor_id, Ticket.assigned_to))
    """

    # =========================================================================
    # Reads
    # =========================================================================

    @staticmethod
    def tenant_scope(identity: IdentityContext) -> ReadScope:
        """Contractor isolation (rules 1 and 2) for any tenant-owned table."""
        if identity.is_platform:
            return ReadScope()
        if identity.contractor_id is None:
            return _DENY_ALL
        return ReadScope(contractor_id=identity.contractor_id)

    @classmethod
    def ticket_scope(cls, identity: IdentityContext) -> ReadScope:
        """Ticket visibility: tenant scope plus assignee restriction (rule 3)."""
        scope = cls.tenant_scope(identity)
        if identity.is_platform or scope.deny_all:
            return scope
        if identity.is_assignee_scoped:
            return ReadScope(contractor_id=scope.contractor_id, assigned_to=identity.user_id)
        return scope

    @classmethod
    def can_read_ticket(cls, identity: IdentityContext, ticket: Any) -> bool:
        return cls.ticket_scope(identity).permits(ticket.contractor_id, ticket.assigned_to)

    # =========================================================================
    # Writes
    # =========================================================================

    @classmethod
    def can_create_ticket(cls, identity: IdentityContext, contractor_id: Optional[int]) -> bool:
        """A ticket may be opened inside the caller's own contractor (any contractor for platform)."""
        if contractor_id is None:
            return False
        return cls.tenant_scope(identity).permits(contractor_id)

    @classmethod
    def can_transition(cls, identity: IdentityContext, ticket: Any) -> bool:
        """
        Status change permission (rule 4).

        The ticket must be readable, and the caller must hold a transition
        role or be its current assignee. Creating the ticket is not enough.
        """
        if not cls.can_read_ticket(identity, ticket):
            return False
        if identity.has_any_role(TRANSITION_ROLES):
            return True
        return ticket.assigned_to is not None and ticket.assigned_to == identity.user_id

    @classmethod
    def can_comment(cls, identity: IdentityContext, ticket: Any) -> bool:
        """Comment permission (rule 5): contractor scope only."""
        return cls.tenant_scope(identity).permits(ticket.contractor_id)

    @staticmethod
    def can_see_internal_comments(identity: IdentityContext) -> bool:
        return identity.is_platform or not identity.is_assignee_scoped
