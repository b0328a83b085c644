"""
Integration tests for the catalog endpoints and the health check.
"""

import pytest
from httpx import AsyncClient

from backoffice.models.ticket import TicketCategory
from tests.factories import ContractorFactory, UserFactory, auth_headers


class TestCatalogs:
    """Tests for /statuses, /priorities and /categories."""

    @pytest.mark.asyncio
    async def test_statuses(self, client: AsyncClient, db_session, catalog):
        user = await UserFactory.create(db_session, contractor=await ContractorFactory.create(db_session))

        response = await client.get("/api/statuses", headers=auth_headers(user))

        assert response.status_code == 200
        statuses = response.json()
        assert statuses[0]["slug"] == "new"
        assert {s["slug"] for s in statuses if s["is_final"]} == {
            "completed",
            "rejected",
            "not_feasible",
        }

    @pytest.mark.asyncio
    async def test_priorities(self, client: AsyncClient, db_session, catalog):
        user = await UserFactory.create(db_session, contractor=await ContractorFactory.create(db_session))

        response = await client.get("/api/priorities", headers=auth_headers(user))

        assert [p["level"] for p in response.json()] == [4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_categories_scoped(self, client: AsyncClient, db_session, catalog):
        mine = await ContractorFactory.create(db_session)
        other = await ContractorFactory.create(db_session)
        db_session.add(TicketCategory(contractor_id=other.id, name="Roofing", slug="roofing"))
        await db_session.commit()
        user = await UserFactory.create(db_session, contractor=mine)

        response = await client.get("/api/categories", headers=auth_headers(user))

        slugs = {c["slug"] for c in response.json()}
        assert slugs == {"hr", "technical", "finance", "general"}

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient, catalog):
        response = await client.get("/api/statuses")

        assert response.status_code in (401, 403)


class TestHealth:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers
