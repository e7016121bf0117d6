"""
Tenant service: business logic for tenant CRUD and branding.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.tenant import Tenant
from app.models.tenant_member import TenantMember
from app.models.user import User

from volunteer_hub_shared.schemas.common import MemberRole, MemberStatus
from volunteer_hub_shared.schemas.tenants import (
    DEFAULT_ACCENT_COLOR,
    DEFAULT_PRIMARY_COLOR,
    TenantCreateRequest,
    TenantUpdateRequest,
)

log = structlog.get_logger()


async def list_tenants(session: AsyncSession) -> list[Tenant]:
    """All tenants ordered by name."""
    result = await session.execute(select(Tenant).order_by(Tenant.name))
    return list(result.scalars().all())


async def get_tenant_by_slug(slug: str, session: AsyncSession) -> Tenant:
    result = await session.execute(select(Tenant).where(Tenant.slug == slug))
    tenant = result.scalar_one_or_none()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


async def get_tenant_by_id(tenant_id: uuid.UUID, session: AsyncSession) -> Tenant:
    tenant = await session.get(Tenant, tenant_id)
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


async def create_tenant(
    req: TenantCreateRequest,
    creator: User,
    session: AsyncSession,
) -> Tenant:
    """Create a tenant and make the creator an active admin."""
    existing = await session.execute(select(Tenant).where(Tenant.slug == req.slug))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Tenant slug already exists")

    tenant = Tenant(
        slug=req.slug,
        name=req.name,
        logo=str(req.logo) if req.logo else None,
        primary_color=req.primary_color or DEFAULT_PRIMARY_COLOR,
        accent_color=req.accent_color or DEFAULT_ACCENT_COLOR,
    )
    session.add(tenant)
    try:
        await session.flush()
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Tenant slug already exists")

    session.add(
        TenantMember(
            tenant_id=tenant.id,
            user_id=creator.id,
            role=MemberRole.ADMIN.value,
            status=MemberStatus.ACTIVE.value,
        )
    )
    await session.flush()

    log.info("tenant.created", tenant_id=str(tenant.id), slug=req.slug, creator=str(creator.id))
    return tenant


async def update_tenant(
    tenant: Tenant,
    req: TenantUpdateRequest,
    session: AsyncSession,
) -> Tenant:
    """Update branding, terminology, or feature flags. Maps replace wholesale."""
    data = req.model_dump(exclude_unset=True)

    if "logo" in data:
        data["logo"] = str(data["logo"]) if data["logo"] else None

    # Non-nullable columns ignore an explicit null
    for key, value in data.items():
        if value is None and key != "logo":
            continue
        setattr(tenant, key, value)

    tenant.updated_at = datetime.now(timezone.utc)
    session.add(tenant)
    await session.flush()

    log.info("tenant.updated", tenant_id=str(tenant.id), fields=sorted(data))
    return tenant


async def delete_tenant(tenant: Tenant, session: AsyncSession) -> None:
    """Delete a tenant; members, opportunities, and signups cascade."""
    await session.delete(tenant)
    await session.flush()
    log.info("tenant.deleted", tenant_id=str(tenant.id), slug=tenant.slug)
