"""
Integration tests for user sync and profiles.

Tests cover:
- Token verification on /users/sync
- Creating, refreshing, and linking invited users
- Profile reads and updates
- Schema validation for profile updates
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from pydantic import ValidationError

from app.core.auth import create_identity_token
from conftest import bearer, sign_in
from volunteer_hub_shared.schemas.users import UserUpdateRequest, pending_external_id


# ---------------------------------------------------------------------------
# Schema validation tests
# ---------------------------------------------------------------------------

class TestUserSchemas:
    def test_bio_length_limit(self):
        with pytest.raises(ValidationError):
            UserUpdateRequest(bio="x" * 501)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            UserUpdateRequest(name="")

    def test_pending_external_id(self):
        assert pending_external_id("a@b.org") == "pending_a@b.org"


# ---------------------------------------------------------------------------
# Sync
# ---------------------------------------------------------------------------

class TestUserSync:

    @pytest.mark.asyncio
    async def test_sync_requires_token(self, client: AsyncClient):
        response = await client.post("/api/v1/users/sync", json={"email": "a@example.org"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_sync_rejects_expired_token(self, client: AsyncClient):
        token = create_identity_token("idp|old", expires_delta=timedelta(seconds=-5))
        response = await client.post(
            "/api/v1/users/sync",
            json={"email": "old@example.org"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_sync_creates_user(self, client: AsyncClient):
        headers = bearer("idp|new", "new@example.org")
        response = await client.post(
            "/api/v1/users/sync",
            json={"email": "new@example.org", "name": "New Person"},
            headers=headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["external_id"] == "idp|new"
        assert data["name"] == "New Person"
        assert data["skills"] == []

    @pytest.mark.asyncio
    async def test_sync_is_idempotent_and_updates_profile(self, client: AsyncClient):
        headers = bearer("idp|same")
        first = await client.post(
            "/api/v1/users/sync", json={"email": "same@example.org", "name": "Old"}, headers=headers
        )
        second = await client.post(
            "/api/v1/users/sync", json={"email": "same@example.org", "name": "New"}, headers=headers
        )
        assert first.json()["id"] == second.json()["id"]
        assert second.json()["name"] == "New"

    @pytest.mark.asyncio
    async def test_sync_follows_email_change(self, client: AsyncClient):
        headers = bearer("idp|mover")
        first = await client.post(
            "/api/v1/users/sync", json={"email": "before@example.org"}, headers=headers
        )
        second = await client.post(
            "/api/v1/users/sync", json={"email": "after@example.org"}, headers=headers
        )
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["email"] == "after@example.org"

    @pytest.mark.asyncio
    async def test_sync_email_of_other_account_conflicts(self, client: AsyncClient):
        await client.post(
            "/api/v1/users/sync", json={"email": "taken@example.org"}, headers=bearer("idp|one")
        )
        response = await client.post(
            "/api/v1/users/sync", json={"email": "taken@example.org"}, headers=bearer("idp|two")
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_sync_links_invited_placeholder(self, client: AsyncClient, slug, admin):
        invite = await client.post(
            f"/api/v1/tenants/{slug}/members",
            json={"email": "invitee@example.org"},
            headers=admin,
        )
        assert invite.status_code == 201
        placeholder = invite.json()["user"]
        assert placeholder["external_id"] == "pending_invitee@example.org"

        response = await client.post(
            "/api/v1/users/sync",
            json={"email": "invitee@example.org", "name": "Invitee"},
            headers=bearer("idp|invitee"),
        )
        assert response.status_code == 200
        assert response.json()["id"] == placeholder["id"]
        assert response.json()["external_id"] == "idp|invitee"


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

class TestUserProfile:

    @pytest.mark.asyncio
    async def test_me_is_null_when_anonymous(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")
        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_me_is_null_before_sync(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me", headers=bearer("idp|ghost"))
        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_update_me(self, client: AsyncClient):
        headers = await sign_in(client, "grace")
        response = await client.patch(
            "/api/v1/users/me",
            json={
                "bio": "Retired teacher",
                "skills": ["tutoring", "first aid"],
                "availability": {"saturday": ["morning"]},
            },
            headers=headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["bio"] == "Retired teacher"
        assert data["skills"] == ["tutoring", "first aid"]
        assert data["availability"] == {"saturday": ["morning"]}
        assert data["name"] == "Grace"

        me = await client.get("/api/v1/users/me", headers=headers)
        assert me.json()["skills"] == ["tutoring", "first aid"]

    @pytest.mark.asyncio
    async def test_update_me_requires_synced_user(self, client: AsyncClient):
        response = await client.patch(
            "/api/v1/users/me", json={"bio": "hi"}, headers=bearer("idp|ghost")
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_get_user_by_id(self, client: AsyncClient):
        headers = await sign_in(client, "hal")
        me = (await client.get("/api/v1/users/me", headers=headers)).json()

        response = await client.get(f"/api/v1/users/{me['id']}", headers=headers)
        assert response.json()["email"] == "hal@example.org"

        missing = await client.get(f"/api/v1/users/{uuid.uuid4()}", headers=headers)
        assert missing.status_code == 200
        assert missing.json() is None
