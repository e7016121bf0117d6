"""
Tenant API endpoints.

GET    /api/v1/tenants                     — List all tenants
POST   /api/v1/tenants                     — Create a tenant (creator becomes admin)
GET    /api/v1/tenants/id/{tenant_id}      — Get a tenant by id
GET    /api/v1/tenants/{tenantSlug}        — Get a tenant by slug
PATCH  /api/v1/tenants/{tenantSlug}        — Update branding, terminology, features
DELETE /api/v1/tenants/{tenantSlug}        — Delete the tenant and everything in it
POST   /api/v1/tenants/{tenantSlug}/join   — Join, accept an invite, or reactivate
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    TenantAccess,
    get_current_user,
    get_tenant_access,
    require_admin,
    require_user,
)
from app.core.database import get_session
from app.models.user import User
from app.services import members as member_service
from app.services import tenants as tenant_service
from volunteer_hub_shared.schemas.common import SuccessResponse
from volunteer_hub_shared.schemas.members import MemberResponse
from volunteer_hub_shared.schemas.tenants import (
    TenantCreateRequest,
    TenantListResponse,
    TenantResponse,
    TenantUpdateRequest,
)

# ---------------------------------------------------------------------------
# Non-tenant-scoped routes (no tenantSlug in path)
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.get("/tenants", response_model=TenantListResponse, tags=["Tenants"])
async def list_tenants(session: AsyncSession = Depends(get_session)):
    """List every tenant, ordered by name."""
    tenants = await tenant_service.list_tenants(session)
    return TenantListResponse(data=[TenantResponse.model_validate(t) for t in tenants])


@router_global.post("/tenants", response_model=TenantResponse, status_code=201, tags=["Tenants"])
async def create_tenant(
    body: TenantCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Create a new tenant. The creator becomes an administrator."""
    tenant = await tenant_service.create_tenant(body, user, session)
    await session.commit()
    return TenantResponse.model_validate(tenant)


@router_global.get("/tenants/id/{tenant_id}", response_model=TenantResponse, tags=["Tenants"])
async def get_tenant_by_id(
    tenant_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    tenant = await tenant_service.get_tenant_by_id(tenant_id, session)
    return TenantResponse.model_validate(tenant)


# ---------------------------------------------------------------------------
# Tenant-scoped routes (tenantSlug in path)
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("", response_model=TenantResponse, tags=["Tenants"])
async def get_tenant(access: TenantAccess = Depends(get_tenant_access)):
    """Get tenant details including branding and terminology."""
    return TenantResponse.model_validate(access.tenant)


@router_scoped.patch("", response_model=TenantResponse, tags=["Tenants"])
async def update_tenant(
    body: TenantUpdateRequest,
    access: TenantAccess = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Update tenant branding or settings (Admin only). Maps are replaced, not merged."""
    tenant = await tenant_service.update_tenant(access.tenant, body, session)
    await session.commit()
    return TenantResponse.model_validate(tenant)


@router_scoped.delete("", response_model=SuccessResponse, tags=["Tenants"])
async def delete_tenant(
    access: TenantAccess = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Delete the tenant with its members, opportunities, and signups (Admin only)."""
    await tenant_service.delete_tenant(access.tenant, session)
    await session.commit()
    return SuccessResponse()


@router_scoped.post("/join", response_model=MemberResponse, tags=["Tenants"])
async def join_tenant(
    access: TenantAccess = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Join as a volunteer. Pending invites and inactive memberships are activated."""
    member = await member_service.join_tenant(session, access.tenant, access.user)
    await session.commit()
    return member_service.to_response(member, tenant=access.tenant)
