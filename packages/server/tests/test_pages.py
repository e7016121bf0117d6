"""
Integration tests for the page-data endpoints.

Each page returns the tenant context (branding, resolved terminology, and
the caller's role flags) alongside the data the screen renders.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import apply, create_opportunity, sign_in
from volunteer_hub_shared.schemas.pages import ApplicationsFilter
from volunteer_hub_shared.schemas.common import SignupStatus


class TestApplicationsFilter:

    def test_single_status(self):
        assert ApplicationsFilter.APPROVED.statuses() == [SignupStatus.APPROVED]

    def test_all_statuses(self):
        assert set(ApplicationsFilter.ALL.statuses()) == set(SignupStatus)


class TestTenantContext:

    @pytest.mark.asyncio
    async def test_anonymous_context(self, client: AsyncClient, slug, admin):
        await client.patch(
            f"/api/v1/tenants/{slug}",
            json={"terminology": {"volunteer": "Helper"}, "features": {"waitlist": True}},
            headers=admin,
        )
        response = await client.get(f"/api/v1/pages/{slug}/home")
        assert response.status_code == 200
        context = response.json()["context"]
        assert context["tenant"]["slug"] == slug
        assert context["terminology"]["volunteer"] == "Helper"
        assert context["terminology"]["opportunity"] == "Opportunity"
        assert context["features"] == {"waitlist": True}
        assert context["membership"] is None
        assert context["is_volunteer"] is False

    @pytest.mark.asyncio
    async def test_role_flags(self, client: AsyncClient, slug, admin, volunteer):
        as_admin = (await client.get(f"/api/v1/pages/{slug}/home", headers=admin)).json()["context"]
        assert as_admin["is_admin"] is True
        assert as_admin["is_coordinator"] is True
        assert as_admin["is_volunteer"] is True

        as_volunteer = (
            await client.get(f"/api/v1/pages/{slug}/home", headers=volunteer)
        ).json()["context"]
        assert as_volunteer["is_admin"] is False
        assert as_volunteer["is_coordinator"] is False
        assert as_volunteer["is_volunteer"] is True
        assert as_volunteer["membership"]["role"] == "VOLUNTEER"

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, client: AsyncClient):
        response = await client.get("/api/v1/pages/missing-org/home")
        assert response.status_code == 404


class TestPublicPages:

    @pytest.mark.asyncio
    async def test_tenants_page(self, client: AsyncClient, slug, admin):
        response = await client.get("/api/v1/pages/tenants")
        assert [t["slug"] for t in response.json()["tenants"]] == [slug]

    @pytest.mark.asyncio
    async def test_home_shows_twelve(self, client: AsyncClient, slug, admin):
        for i in range(13):
            await create_opportunity(client, slug, admin, title=f"Opportunity {i:02d}")
        await create_opportunity(client, slug, admin, title="Draft", publish=False)

        data = (await client.get(f"/api/v1/pages/{slug}/home")).json()
        assert len(data["opportunities"]) == 12
        assert data["has_more"] is True
        assert "Draft" not in [o["title"] for o in data["opportunities"]]

    @pytest.mark.asyncio
    async def test_opportunities_page(self, client: AsyncClient, slug, admin):
        await create_opportunity(client, slug, admin, title="Shift A", type="SHIFT")
        await create_opportunity(client, slug, admin, title="Event B", type="EVENT")

        data = (
            await client.get(f"/api/v1/pages/{slug}/opportunities", params={"type": "SHIFT"})
        ).json()
        assert [o["title"] for o in data["opportunities"]] == ["Shift A"]
        assert data["total"] == 1
        assert data["page"] == 1
        assert data["page_size"] == 12

        empty = (
            await client.get(f"/api/v1/pages/{slug}/opportunities", params={"page": 2})
        ).json()
        assert empty["opportunities"] == []
        assert empty["total"] == 2

    @pytest.mark.asyncio
    async def test_opportunity_page_with_my_signup(self, client: AsyncClient, slug, admin, volunteer):
        opportunity = await create_opportunity(client, slug, admin)
        url = f"/api/v1/pages/{slug}/opportunities/{opportunity['id']}"

        anonymous = (await client.get(url)).json()
        assert anonymous["opportunity"]["id"] == opportunity["id"]
        assert anonymous["my_signup"] is None

        signup = await apply(client, slug, opportunity["id"], volunteer)
        mine = (await client.get(url, headers=volunteer)).json()
        assert mine["my_signup"]["id"] == signup["id"]
        assert mine["opportunity"]["active_signup_count"] == 1

    @pytest.mark.asyncio
    async def test_opportunity_page_hides_drafts(self, client: AsyncClient, slug, admin, volunteer):
        draft = await create_opportunity(client, slug, admin, publish=False)
        url = f"/api/v1/pages/{slug}/opportunities/{draft['id']}"
        assert (await client.get(url, headers=volunteer)).status_code == 404
        assert (await client.get(url, headers=admin)).status_code == 200


class TestManagePages:

    @pytest.mark.asyncio
    async def test_dashboard(self, client: AsyncClient, slug, admin, volunteer):
        published = await create_opportunity(client, slug, admin, title="Published")
        await create_opportunity(client, slug, admin, title="Draft", publish=False)
        await apply(client, slug, published["id"], volunteer)

        data = (await client.get(f"/api/v1/pages/{slug}/manage", headers=admin)).json()
        assert [o["title"] for o in data["opportunities"]] == ["Draft", "Published"]
        assert data["members_total"] == 2
        assert data["pending_applications_count"] == 1

    @pytest.mark.asyncio
    async def test_manage_requires_coordinator(self, client: AsyncClient, slug, volunteer):
        for path in ("manage", "manage/applications", "manage/members"):
            response = await client.get(f"/api/v1/pages/{slug}/{path}", headers=volunteer)
            assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_applications_filter(self, client: AsyncClient, slug, admin, volunteer):
        opportunity = await create_opportunity(client, slug, admin, capacity=5)
        other = await sign_in(client, "wes")
        await client.post(f"/api/v1/tenants/{slug}/join", headers=other)
        approved = await apply(client, slug, opportunity["id"], volunteer)
        await apply(client, slug, opportunity["id"], other)
        await client.patch(
            f"/api/v1/tenants/{slug}/signups/{approved['id']}",
            json={"status": "APPROVED"},
            headers=admin,
        )
        url = f"/api/v1/pages/{slug}/manage/applications"

        pending = (await client.get(url, headers=admin)).json()["applications"]
        assert [a["user"]["email"] for a in pending] == ["wes@example.org"]
        assert pending[0]["opportunity"]["title"] == opportunity["title"]

        accepted = (await client.get(url, params={"status": "APPROVED"}, headers=admin)).json()
        assert [a["id"] for a in accepted["applications"]] == [approved["id"]]

        everything = (await client.get(url, params={"status": "all"}, headers=admin)).json()
        assert len(everything["applications"]) == 2

    @pytest.mark.asyncio
    async def test_members_page(self, client: AsyncClient, slug, admin, volunteer):
        data = (await client.get(f"/api/v1/pages/{slug}/manage/members", headers=admin)).json()
        assert data["total"] == 2

        volunteers = (
            await client.get(
                f"/api/v1/pages/{slug}/manage/members", params={"role": "VOLUNTEER"}, headers=admin
            )
        ).json()
        assert [m["user"]["email"] for m in volunteers["members"]] == ["vic@example.org"]


class TestMySignupsPage:

    @pytest.mark.asyncio
    async def test_scoped_to_tenant(self, client: AsyncClient, slug, admin, volunteer):
        here = await create_opportunity(client, slug, admin, title="Here")
        await apply(client, slug, here["id"], volunteer)

        await client.post("/api/v1/tenants", json={"slug": "elsewhere", "name": "Elsewhere"}, headers=admin)
        there = await create_opportunity(client, "elsewhere", admin, title="There")
        await client.post("/api/v1/tenants/elsewhere/join", headers=volunteer)
        await apply(client, "elsewhere", there["id"], volunteer)

        data = (await client.get(f"/api/v1/pages/{slug}/my-signups", headers=volunteer)).json()
        assert [s["opportunity"]["title"] for s in data["signups"]] == ["Here"]

    @pytest.mark.asyncio
    async def test_requires_sign_in(self, client: AsyncClient, slug, admin):
        response = await client.get(f"/api/v1/pages/{slug}/my-signups")
        assert response.status_code == 401
