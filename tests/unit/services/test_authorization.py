"""
Tests for AuthorizationGuard.

WHY: Every tenant and role rule is decided here, so the rules are tested
as pure functions over hand-built identities:
1. Platform role is unrestricted
2. Everyone else is confined to their contractor
3. External assignees only see tickets assigned to them
4. Only administrators or the assignee may change a ticket's status
"""

from types import SimpleNamespace

from sqlalchemy import false

from backoffice.core.identity import IdentityContext
from backoffice.models.ticket import Ticket
from backoffice.services.authorization import AuthorizationGuard, ReadScope


def identity(user_id=1, contractor_id=10, roles=("user",)) -> IdentityContext:
    return IdentityContext.build(user_id=user_id, contractor_id=contractor_id, roles=roles)


def ticket(contractor_id=10, assigned_to=None):
    return SimpleNamespace(contractor_id=contractor_id, assigned_to=assigned_to)


class TestScopes:
    """Tests for read scopes."""

    def test_platform_role_is_unrestricted(self):
        scope = AuthorizationGuard.ticket_scope(identity(contractor_id=None, roles=("superadmin",)))

        assert scope.is_unrestricted
        assert scope.conditions(Ticket.contractor_id, Ticket.assigned_to) == []

    def test_contractor_user_is_confined(self):
        scope = AuthorizationGuard.tenant_scope(identity(contractor_id=10, roles=("admin",)))

        assert scope == ReadScope(contractor_id=10)
        assert scope.permits(10)
        assert not scope.permits(11)

    def test_user_without_contractor_sees_nothing(self):
        scope = AuthorizationGuard.tenant_scope(identity(contractor_id=None, roles=("admin",)))

        assert scope.deny_all
        assert not scope.permits(10)
        assert str(scope.conditions(Ticket.contractor_id)[0]) == str(false())

    def test_external_assignee_limited_to_own_tickets(self):
        scope = AuthorizationGuard.ticket_scope(identity(user_id=5, roles=("contractor",)))

        assert scope == ReadScope(contractor_id=10, assigned_to=5)
        assert len(scope.conditions(Ticket.contractor_id, Ticket.assigned_to)) == 2

    def test_assignee_restriction_only_applies_to_tickets(self):
        """Tenant scope for other tables ignores the assignee restriction."""
        scope = AuthorizationGuard.tenant_scope(identity(user_id=5, roles=("contractor",)))

        assert scope.assigned_to is None


class TestTicketPermissions:
    """Tests for per-ticket decisions."""

    def test_read_in_own_contractor(self):
        assert AuthorizationGuard.can_read_ticket(identity(), ticket())

    def test_read_denied_across_contractors(self):
        assert not AuthorizationGuard.can_read_ticket(identity(), ticket(contractor_id=99))

    def test_assignee_reads_only_assigned(self):
        caller = identity(user_id=5, roles=("contractor",))

        assert AuthorizationGuard.can_read_ticket(caller, ticket(assigned_to=5))
        assert not AuthorizationGuard.can_read_ticket(caller, ticket(assigned_to=6))

    def test_create_only_in_own_contractor(self):
        caller = identity()

        assert AuthorizationGuard.can_create_ticket(caller, 10)
        assert not AuthorizationGuard.can_create_ticket(caller, 11)
        assert not AuthorizationGuard.can_create_ticket(caller, None)

    def test_platform_creates_anywhere(self):
        caller = identity(contractor_id=None, roles=("superadmin",))

        assert AuthorizationGuard.can_create_ticket(caller, 42)


class TestTransitionPermission:
    """Tests for status-change permission."""

    def test_admin_may_transition(self):
        assert AuthorizationGuard.can_transition(identity(roles=("admin",)), ticket())

    def test_superadmin_may_transition_any_contractor(self):
        caller = identity(contractor_id=None, roles=("superadmin",))

        assert AuthorizationGuard.can_transition(caller, ticket(contractor_id=77))

    def test_assignee_may_transition(self):
        assert AuthorizationGuard.can_transition(identity(user_id=3), ticket(assigned_to=3))

    def test_creator_alone_may_not_transition(self):
        """Opening a ticket does not grant the right to move it."""
        assert not AuthorizationGuard.can_transition(identity(user_id=3), ticket(assigned_to=None))

    def test_data_controller_is_not_a_transition_role(self):
        assert not AuthorizationGuard.can_transition(
            identity(roles=("data_controller",)), ticket()
        )

    def test_admin_of_other_contractor_denied(self):
        assert not AuthorizationGuard.can_transition(
            identity(roles=("admin",)), ticket(contractor_id=11)
        )


class TestComments:
    """Tests for comment permissions."""

    def test_external_assignee_comments_on_unassigned_ticket(self):
        """Commenting needs contractor scope only."""
        caller = identity(user_id=5, roles=("contractor",))

        assert AuthorizationGuard.can_comment(caller, ticket(assigned_to=None))

    def test_comment_denied_across_contractors(self):
        assert not AuthorizationGuard.can_comment(identity(), ticket(contractor_id=99))

    def test_internal_comment_visibility(self):
        assert AuthorizationGuard.can_see_internal_comments(identity(roles=("admin",)))
        assert not AuthorizationGuard.can_see_internal_comments(identity(roles=("contractor",)))
        assert AuthorizationGuard.can_see_internal_comments(
            identity(contractor_id=None, roles=("superadmin", "contractor"))
        )
