"""
Shared fixtures: an in-memory SQLite database behind the app's session
dependency, an ASGI client, and helpers that sign users in and build the
tenant, membership, and opportunity rows most tests start from.
"""

from __future__ import annotations

import os

os.environ.setdefault("VH_ENVIRONMENT", "test")
os.environ.setdefault("VH_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("VH_AUTH_JWT_SECRET", "test-secret-with-enough-length-for-hs256")
os.environ.setdefault("VH_LOG_LEVEL", "WARNING")

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.auth import create_identity_token
from app.core.database import build_engine, get_session, init_db
from app.main import app


# ---------------------------------------------------------------------------
# Fixtures: in-memory SQLite for fast tests
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    """A session for arranging and inspecting rows directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_test_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_test_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def bearer(external_id: str, email: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_identity_token(external_id, email=email)}"}


async def sign_in(client: AsyncClient, name: str) -> dict[str, str]:
    """Sync a user through the API and return their auth headers."""
    email = f"{name}@example.org"
    headers = bearer(f"idp|{name}", email)
    response = await client.post(
        "/api/v1/users/sync",
        json={"email": email, "name": name.title()},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return headers


async def join(client: AsyncClient, slug: str, headers: dict[str, str]) -> dict:
    response = await client.post(f"/api/v1/tenants/{slug}/join", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def create_opportunity(
    client: AsyncClient,
    slug: str,
    headers: dict[str, str],
    *,
    publish: bool = True,
    **fields,
) -> dict:
    body = {
        "title": "River Cleanup",
        "description": "Collect litter along the riverbank.",
        "start_date": (datetime.now(timezone.utc) + timedelta(days=3)).isoformat(),
        "capacity": 0,
    }
    body.update(fields)
    response = await client.post(
        f"/api/v1/tenants/{slug}/opportunities", json=body, headers=headers
    )
    assert response.status_code == 201, response.text
    opportunity = response.json()
    if publish:
        response = await client.post(
            f"/api/v1/tenants/{slug}/opportunities/{opportunity['id']}/publish",
            headers=headers,
        )
        assert response.status_code == 200, response.text
        opportunity = response.json()
    return opportunity


async def apply(client: AsyncClient, slug: str, opportunity_id: str, headers: dict[str, str]) -> dict:
    response = await client.post(
        f"/api/v1/tenants/{slug}/opportunities/{opportunity_id}/signups",
        json={"notes": "Happy to help"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def slug() -> str:
    return f"org-{uuid.uuid4().hex[:8]}"


@pytest.fixture
async def admin(client: AsyncClient, slug: str) -> dict[str, str]:
    """Headers for the admin who created the tenant at `slug`."""
    headers = await sign_in(client, "ada")
    response = await client.post(
        "/api/v1/tenants", json={"slug": slug, "name": "Riverside Aid"}, headers=headers
    )
    assert response.status_code == 201, response.text
    return headers


@pytest.fixture
async def volunteer(client: AsyncClient, slug: str, admin) -> dict[str, str]:
    """Headers for an active volunteer of the tenant."""
    headers = await sign_in(client, "vic")
    await join(client, slug, headers)
    return headers
