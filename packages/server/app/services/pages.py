"""
Page loaders: assemble everything one tenant page renders in a single call.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import TenantAccess
from app.services import members as member_service
from app.services import opportunities as opportunity_service
from app.services import signups as signup_service
from app.services.tenants import list_tenants
from volunteer_hub_shared.schemas.common import (
    MemberRole,
    OpportunityStatus,
    OpportunityType,
    SignupStatus,
    SortOrder,
    has_more,
)
from volunteer_hub_shared.schemas.opportunities import OpportunitySortField
from volunteer_hub_shared.schemas.pages import (
    APPLICATIONS_LIMIT,
    HOME_PAGE_SIZE,
    MANAGE_OPPORTUNITIES_LIMIT,
    MEMBERS_PAGE_LIMIT,
    OPPORTUNITIES_PAGE_SIZE,
    ApplicationsFilter,
    ApplicationsPage,
    HomePage,
    ManageDashboardPage,
    MembersPage,
    MySignupsPage,
    OpportunitiesPage,
    OpportunityPage,
    TenantContext,
    TenantsPage,
)
from volunteer_hub_shared.schemas.tenants import TenantResponse, resolve_terminology


def build_context(access: TenantAccess) -> TenantContext:
    tenant = access.tenant
    return TenantContext(
        tenant=TenantResponse.model_validate(tenant),
        terminology=resolve_terminology(tenant.terminology),
        features=tenant.features or {},
        membership=(
            member_service.to_response(access.membership) if access.membership else None
        ),
        is_admin=access.is_admin,
        is_coordinator=access.is_coordinator,
        is_volunteer=access.is_member,
    )


async def tenants_page(session: AsyncSession) -> TenantsPage:
    tenants = await list_tenants(session)
    return TenantsPage(tenants=[TenantResponse.model_validate(t) for t in tenants])


async def home_page(session: AsyncSession, access: TenantAccess) -> HomePage:
    """Upcoming published opportunities, soonest first."""
    opportunities, total = await opportunity_service.list_opportunities(
        session, access.tenant_id, limit=HOME_PAGE_SIZE
    )
    return HomePage(
        context=build_context(access),
        opportunities=await opportunity_service.enrich_opportunities(session, opportunities),
        has_more=has_more(0, len(opportunities), total),
    )


async def opportunities_page(
    session: AsyncSession,
    access: TenantAccess,
    *,
    type: Optional[OpportunityType] = None,
    search: Optional[str] = None,
    page: int = 1,
) -> OpportunitiesPage:
    opportunities, total = await opportunity_service.list_opportunities(
        session,
        access.tenant_id,
        type=type,
        search=search,
        limit=OPPORTUNITIES_PAGE_SIZE,
        offset=(page - 1) * OPPORTUNITIES_PAGE_SIZE,
    )
    return OpportunitiesPage(
        context=build_context(access),
        opportunities=await opportunity_service.enrich_opportunities(session, opportunities),
        total=total,
        page=page,
    )


async def opportunity_page(
    session: AsyncSession, access: TenantAccess, opportunity_id: uuid.UUID
) -> OpportunityPage:
    opportunity = await opportunity_service.get_opportunity_or_404(
        session, opportunity_id, access.tenant_id
    )
    if opportunity.status != OpportunityStatus.PUBLISHED.value and not access.is_coordinator:
        raise HTTPException(status_code=404, detail="Opportunity not found")

    my_signup = None
    if access.user is not None:
        signup = await signup_service.get_signup(session, opportunity.id, access.user.id)
        my_signup = signup_service.to_read(signup) if signup else None

    return OpportunityPage(
        context=build_context(access),
        opportunity=await opportunity_service.enrich_opportunity(session, opportunity),
        my_signup=my_signup,
    )


async def manage_dashboard_page(
    session: AsyncSession, access: TenantAccess
) -> ManageDashboardPage:
    """Every opportunity regardless of status, newest first, plus headline counts."""
    opportunities, _ = await opportunity_service.list_opportunities(
        session,
        access.tenant_id,
        status=None,
        sort_by=OpportunitySortField.CREATED_AT,
        sort_order=SortOrder.DESC,
        limit=MANAGE_OPPORTUNITIES_LIMIT,
    )
    return ManageDashboardPage(
        context=build_context(access),
        opportunities=await opportunity_service.enrich_opportunities(session, opportunities),
        members_total=await member_service.count_active_members(session, access.tenant_id),
        pending_applications_count=await signup_service.count_signups(
            session, access.tenant_id, SignupStatus.APPLIED
        ),
    )


async def applications_page(
    session: AsyncSession,
    access: TenantAccess,
    status: ApplicationsFilter = ApplicationsFilter.APPLIED,
) -> ApplicationsPage:
    applications = await signup_service.list_applications(
        session, access.tenant_id, status.statuses(), APPLICATIONS_LIMIT
    )
    return ApplicationsPage(context=build_context(access), applications=applications)


async def members_page(
    session: AsyncSession,
    access: TenantAccess,
    *,
    role: Optional[MemberRole] = None,
    search: Optional[str] = None,
) -> MembersPage:
    members, total = await member_service.list_members(
        session, access.tenant_id, role=role, search=search, limit=MEMBERS_PAGE_LIMIT
    )
    return MembersPage(context=build_context(access), members=members, total=total)


async def my_signups_page(session: AsyncSession, access: TenantAccess) -> MySignupsPage:
    signups, _ = await signup_service.get_my_signups(
        session, access.user.id, tenant_id=access.tenant_id, limit=100
    )
    return MySignupsPage(context=build_context(access), signups=signups)
