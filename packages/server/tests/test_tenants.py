"""
Integration tests for Tenant endpoints.

Tests cover:
- Tenant CRUD (create, list, get by slug and id, update, delete)
- Slug and color validation
- Terminology resolution
- Joining a tenant
"""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient
from pydantic import ValidationError

from conftest import join, sign_in
from volunteer_hub_shared.schemas.tenants import (
    DEFAULT_TERMINOLOGY,
    TenantCreateRequest,
    resolve_terminology,
    term,
)


# ---------------------------------------------------------------------------
# Schema validation tests (no DB needed)
# ---------------------------------------------------------------------------

class TestTenantCreateRequestValidation:

    def test_valid_slug(self):
        req = TenantCreateRequest(name="Food Bank", slug="food-bank-2")
        assert req.slug == "food-bank-2"

    def test_invalid_slug_uppercase(self):
        with pytest.raises(ValidationError):
            TenantCreateRequest(name="Test", slug="Food-Bank")

    def test_slug_too_short(self):
        with pytest.raises(ValidationError):
            TenantCreateRequest(name="Test", slug="ab")

    def test_slug_too_long(self):
        with pytest.raises(ValidationError):
            TenantCreateRequest(name="Test", slug="a" * 51)

    def test_bad_color(self):
        with pytest.raises(ValidationError):
            TenantCreateRequest(name="Test", slug="test", primary_color="blue")


class TestTerminology:

    def test_defaults_without_custom(self):
        assert resolve_terminology(None) == DEFAULT_TERMINOLOGY

    def test_custom_overrides_merge(self):
        resolved = resolve_terminology({"volunteer": "Helper", "opportunity": ""})
        assert resolved["volunteer"] == "Helper"
        assert resolved["opportunity"] == "Opportunity"
        assert resolved["apply"] == "Apply"

    def test_term_falls_back_to_key(self):
        assert term({"volunteer": "Helper"}, "volunteer") == "Helper"
        assert term({}, "signup") == "Sign Up"
        assert term(None, "unknown-key") == "unknown-key"


# ---------------------------------------------------------------------------
# API tests
# ---------------------------------------------------------------------------

class TestTenantCrud:

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/tenants", json={"slug": "nope", "name": "Nope"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_applies_branding_defaults(self, client: AsyncClient, slug, admin):
        response = await client.get(f"/api/v1/tenants/{slug}")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Riverside Aid"
        assert data["primary_color"] == "#3b82f6"
        assert data["accent_color"] == "#10b981"
        assert data["terminology"] == {}

    @pytest.mark.asyncio
    async def test_creator_becomes_admin(self, client: AsyncClient, slug, admin):
        response = await client.get("/api/v1/me/memberships", headers=admin)
        memberships = response.json()["data"]
        assert len(memberships) == 1
        assert memberships[0]["role"] == "ADMIN"
        assert memberships[0]["status"] == "ACTIVE"
        assert memberships[0]["tenant"]["slug"] == slug

    @pytest.mark.asyncio
    async def test_duplicate_slug_conflicts(self, client: AsyncClient, slug, admin):
        response = await client.post(
            "/api/v1/tenants", json={"slug": slug, "name": "Again"}, headers=admin
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Tenant slug already exists"

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_name(self, client: AsyncClient, admin):
        for slug, name in [("zeta-club", "Zeta Club"), ("alpha-club", "Alpha Club")]:
            await client.post("/api/v1/tenants", json={"slug": slug, "name": name}, headers=admin)
        response = await client.get("/api/v1/tenants")
        names = [t["name"] for t in response.json()["data"]]
        assert names == sorted(names)
        assert "Alpha Club" in names

    @pytest.mark.asyncio
    async def test_get_unknown_slug(self, client: AsyncClient):
        response = await client.get("/api/v1/tenants/does-not-exist")
        assert response.status_code == 404
        assert response.json()["detail"] == "Tenant not found"

    @pytest.mark.asyncio
    async def test_get_by_id(self, client: AsyncClient, slug, admin):
        tenant = (await client.get(f"/api/v1/tenants/{slug}")).json()
        response = await client.get(f"/api/v1/tenants/id/{tenant['id']}")
        assert response.json()["slug"] == slug

        missing = await client.get(f"/api/v1/tenants/id/{uuid.uuid4()}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_update_branding_and_terminology(self, client: AsyncClient, slug, admin):
        response = await client.patch(
            f"/api/v1/tenants/{slug}",
            json={
                "primary_color": "#112233",
                "terminology": {"volunteer": "Helper"},
                "features": {"waitlist": True},
            },
            headers=admin,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["primary_color"] == "#112233"
        assert data["terminology"] == {"volunteer": "Helper"}
        assert data["features"] == {"waitlist": True}
        assert data["name"] == "Riverside Aid"

    @pytest.mark.asyncio
    async def test_update_requires_admin(self, client: AsyncClient, slug, volunteer):
        response = await client.patch(
            f"/api/v1/tenants/{slug}", json={"name": "Taken Over"}, headers=volunteer
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_cascades(self, client: AsyncClient, slug, admin, volunteer):
        from conftest import create_opportunity

        await create_opportunity(client, slug, admin)
        response = await client.delete(f"/api/v1/tenants/{slug}", headers=admin)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert (await client.get(f"/api/v1/tenants/{slug}")).status_code == 404
        memberships = await client.get("/api/v1/me/memberships", headers=volunteer)
        assert memberships.json()["data"] == []


class TestJoinTenant:

    @pytest.mark.asyncio
    async def test_join_creates_active_volunteer(self, client: AsyncClient, slug, admin):
        headers = await sign_in(client, "june")
        member = await join(client, slug, headers)
        assert member["role"] == "VOLUNTEER"
        assert member["status"] == "ACTIVE"

    @pytest.mark.asyncio
    async def test_join_twice_conflicts(self, client: AsyncClient, slug, volunteer):
        response = await client.post(f"/api/v1/tenants/{slug}/join", headers=volunteer)
        assert response.status_code == 409
        assert response.json()["detail"] == "You are already a member of this organization"

    @pytest.mark.asyncio
    async def test_join_accepts_pending_invite(self, client: AsyncClient, slug, admin):
        await client.post(
            f"/api/v1/tenants/{slug}/members",
            json={"email": "kim@example.org", "role": "COORDINATOR"},
            headers=admin,
        )
        headers = await sign_in(client, "kim")
        member = await join(client, slug, headers)
        assert member["status"] == "ACTIVE"
        assert member["role"] == "COORDINATOR"

    @pytest.mark.asyncio
    async def test_join_unknown_tenant(self, client: AsyncClient):
        headers = await sign_in(client, "lee")
        response = await client.post("/api/v1/tenants/nowhere/join", headers=headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_join_requires_auth(self, client: AsyncClient, slug, admin):
        response = await client.post(f"/api/v1/tenants/{slug}/join")
        assert response.status_code == 401
