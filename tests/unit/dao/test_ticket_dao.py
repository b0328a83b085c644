"""
Tests for TicketDAO.

WHY: The DAO applies the read scope and compiles both the dedicated query
parameters and the caller's filter array into one statement, so:
1. Scope is always applied
2. Query parameters and criteria combine with AND
3. Numbering is global
"""

from datetime import date, datetime

import pytest

from backoffice.core.exceptions import FilterCriteriaError
from backoffice.dao.ticket import TicketDAO, TicketAttachmentDAO
from backoffice.services.authorization import ReadScope
from tests.factories import ContractorFactory, UserFactory, TicketFactory


TODAY = date(2024, 6, 15)


async def _setup(db_session):
    contractor = await ContractorFactory.create(db_session)
    user = await UserFactory.create(db_session, contractor=contractor)
    return contractor, user


class TestNextTicketNumber:
    """Tests for ticket number allocation."""

    @pytest.mark.asyncio
    async def test_first_number(self, db_session, catalog):
        assert await TicketDAO(db_session).next_ticket_number() == "#1"

    @pytest.mark.asyncio
    async def test_numeric_not_lexical_maximum(self, db_session, catalog):
        """#10 follows #9, not #2."""
        contractor, user = await _setup(db_session)
        for _ in range(9):
            await TicketFactory.create(db_session, contractor, user, catalog.statuses["new"])

        assert await TicketDAO(db_session).next_ticket_number() == "#10"

    @pytest.mark.asyncio
    async def test_numbers_are_global(self, db_session, catalog):
        first, user_a = await _setup(db_session)
        second, user_b = await _setup(db_session)
        await TicketFactory.create(db_session, first, user_a, catalog.statuses["new"])

        ticket = await TicketFactory.create(db_session, second, user_b, catalog.statuses["new"])

        assert ticket.ticket_number == "#2"


class TestList:
    """Tests for scoped, filtered listing."""

    @pytest.mark.asyncio
    async def test_scope_limits_contractor(self, db_session, catalog):
        mine, user = await _setup(db_session)
        other, other_user = await _setup(db_session)
        own = await TicketFactory.create(db_session, mine, user, catalog.statuses["new"])
        await TicketFactory.create(db_session, other, other_user, catalog.statuses["new"])

        tickets, total = await TicketDAO(db_session).list(ReadScope(contractor_id=mine.id))

        assert total == 1
        assert [t.id for t in tickets] == [own.id]

    @pytest.mark.asyncio
    async def test_deny_all_scope(self, db_session, catalog):
        contractor, user = await _setup(db_session)
        await TicketFactory.create(db_session, contractor, user, catalog.statuses["new"])

        tickets, total = await TicketDAO(db_session).list(ReadScope(deny_all=True))

        assert (tickets, total) == ([], 0)

    @pytest.mark.asyncio
    async def test_assignee_scope(self, db_session, catalog):
        contractor, user = await _setup(db_session)
        worker = await UserFactory.create(db_session, contractor=contractor, roles=("contractor",))
        assigned = await TicketFactory.create(
            db_session, contractor, user, catalog.statuses["new"], assignee=worker
        )
        await TicketFactory.create(db_session, contractor, user, catalog.statuses["new"])

        tickets, _ = await TicketDAO(db_session).list(
            ReadScope(contractor_id=contractor.id, assigned_to=worker.id)
        )

        assert [t.id for t in tickets] == [assigned.id]

    @pytest.mark.asyncio
    async def test_query_params_and_criteria_combine(self, db_session, catalog):
        contractor, user = await _setup(db_session)
        match = await TicketFactory.create(
            db_session,
            contractor,
            user,
            catalog.statuses["new"],
            category=catalog.categories["technical"],
            created_at=datetime(2024, 6, 30, 18, 0),
        )
        await TicketFactory.create(
            db_session,
            contractor,
            user,
            catalog.statuses["new"],
            category=catalog.categories["hr"],
            created_at=datetime(2024, 6, 10),
        )
        await TicketFactory.create(
            db_session,
            contractor,
            user,
            catalog.statuses["new"],
            category=catalog.categories["technical"],
            created_at=datetime(2024, 5, 31, 23, 0),
        )

        tickets, total = await TicketDAO(db_session).list(
            ReadScope(contractor_id=contractor.id),
            status="new",
            criteria=[
                {"field": "category", "value": "technical"},
                {"field": "date_range", "value": "this_month"},
            ],
            today=TODAY,
        )

        assert total == 1
        assert tickets[0].id == match.id

    @pytest.mark.asyncio
    async def test_urgent_and_search(self, db_session, catalog):
        contractor, user = await _setup(db_session)
        leak = await TicketFactory.create(
            db_session,
            contractor,
            user,
            catalog.statuses["new"],
            title="Leaky pipe",
            priority=catalog.priorities["critical"],
        )
        await TicketFactory.create(
            db_session,
            contractor,
            user,
            catalog.statuses["new"],
            title="Leaky tap",
            priority=catalog.priorities["low"],
        )

        tickets, _ = await TicketDAO(db_session).list(
            ReadScope(contractor_id=contractor.id), search="leaky", urgent=True
        )

        assert [t.id for t in tickets] == [leak.id]

    @pytest.mark.asyncio
    async def test_newest_first_and_pagination(self, db_session, catalog):
        contractor, user = await _setup(db_session)
        created = []
        for day in range(1, 6):
            created.append(
                await TicketFactory.create(
                    db_session,
                    contractor,
                    user,
                    catalog.statuses["new"],
                    created_at=datetime(2024, 6, day),
                )
            )

        page, total = await TicketDAO(db_session).list(
            ReadScope(contractor_id=contractor.id), page=2, limit=2
        )

        assert total == 5
        assert [t.id for t in page] == [created[2].id, created[1].id]

    @pytest.mark.asyncio
    async def test_too_many_criteria(self, db_session, catalog):
        criteria = [{"field": "status", "value": "new"}] * 11

        with pytest.raises(FilterCriteriaError):
            await TicketDAO(db_session).list(ReadScope(), criteria=criteria)


class TestAttachments:
    """Tests for attachment listing."""

    @pytest.mark.asyncio
    async def test_in_upload_order(self, db_session, catalog):
        contractor, user = await _setup(db_session)
        ticket = await TicketFactory.create(db_session, contractor, user, catalog.statuses["new"])
        await TicketFactory.attach(db_session, ticket, "before.jpg")
        await TicketFactory.attach(db_session, ticket, "after.jpg")

        attachments = await TicketAttachmentDAO(db_session).list_for_ticket(ticket.id)

        assert [a.file_name for a in attachments] == ["before.jpg", "after.jpg"]
