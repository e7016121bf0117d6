"""
Page-data endpoints: one request per screen, branding and terminology included.

GET /api/v1/pages/tenants
GET /api/v1/pages/{tenantSlug}/home
GET /api/v1/pages/{tenantSlug}/opportunities
GET /api/v1/pages/{tenantSlug}/opportunities/{opportunity_id}
GET /api/v1/pages/{tenantSlug}/manage                 (Coordinator)
GET /api/v1/pages/{tenantSlug}/manage/applications    (Coordinator)
GET /api/v1/pages/{tenantSlug}/manage/members         (Coordinator)
GET /api/v1/pages/{tenantSlug}/my-signups             (Signed in)
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import TenantAccess, get_tenant_access, require_coordinator, require_user
from app.core.database import get_session
from app.services import pages as page_service
from volunteer_hub_shared.schemas.common import MemberRole, OpportunityType
from volunteer_hub_shared.schemas.pages import (
    ApplicationsFilter,
    ApplicationsPage,
    HomePage,
    ManageDashboardPage,
    MembersPage,
    MySignupsPage,
    OpportunitiesPage,
    OpportunityPage,
    TenantsPage,
)

router = APIRouter()


@router.get("/tenants", response_model=TenantsPage)
async def tenants_page(session: AsyncSession = Depends(get_session)):
    return await page_service.tenants_page(session)


@router.get("/{tenantSlug}/home", response_model=HomePage)
async def home_page(
    access: TenantAccess = Depends(get_tenant_access),
    session: AsyncSession = Depends(get_session),
):
    return await page_service.home_page(session, access)


@router.get("/{tenantSlug}/opportunities", response_model=OpportunitiesPage)
async def opportunities_page(
    type: Optional[OpportunityType] = None,
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    access: TenantAccess = Depends(get_tenant_access),
    session: AsyncSession = Depends(get_session),
):
    return await page_service.opportunities_page(
        session, access, type=type, search=search, page=page
    )


@router.get("/{tenantSlug}/opportunities/{opportunity_id}", response_model=OpportunityPage)
async def opportunity_page(
    opportunity_id: uuid.UUID,
    access: TenantAccess = Depends(get_tenant_access),
    session: AsyncSession = Depends(get_session),
):
    return await page_service.opportunity_page(session, access, opportunity_id)


@router.get("/{tenantSlug}/manage", response_model=ManageDashboardPage)
async def manage_dashboard_page(
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    return await page_service.manage_dashboard_page(session, access)


@router.get("/{tenantSlug}/manage/applications", response_model=ApplicationsPage)
async def applications_page(
    status: ApplicationsFilter = ApplicationsFilter.APPLIED,
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    return await page_service.applications_page(session, access, status)


@router.get("/{tenantSlug}/manage/members", response_model=MembersPage)
async def members_page(
    role: Optional[MemberRole] = None,
    search: Optional[str] = Query(None, max_length=200),
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    return await page_service.members_page(session, access, role=role, search=search)


@router.get("/{tenantSlug}/my-signups", response_model=MySignupsPage)
async def my_signups_page(
    access: TenantAccess = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    return await page_service.my_signups_page(session, access)
