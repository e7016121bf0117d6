"""
Opportunity endpoints: CRUD, publishing, and the per-opportunity signup routes.

Published opportunities are public. Drafts, cancelled and completed
opportunities are visible to coordinators only.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    TenantAccess,
    get_tenant_access,
    require_coordinator,
    require_member,
    require_user,
)
from app.core.database import get_session
from app.models.opportunity import Opportunity
from app.services import opportunities as opportunity_service
from app.services import signups as signup_service
from volunteer_hub_shared.schemas.common import (
    OpportunityStatus,
    OpportunityType,
    SignupStatus,
    SortOrder,
    SuccessResponse,
    has_more,
)
from volunteer_hub_shared.schemas.opportunities import (
    OpportunityCreate,
    OpportunityListResponse,
    OpportunityRead,
    OpportunitySortField,
    OpportunityUpdate,
)
from volunteer_hub_shared.schemas.signups import (
    SignupApply,
    SignupListResponse,
    SignupRead,
)

router = APIRouter()


async def _visible_opportunity(
    session: AsyncSession, access: TenantAccess, opportunity_id: uuid.UUID
) -> Opportunity:
    opportunity = await opportunity_service.get_opportunity_or_404(
        session, opportunity_id, access.tenant_id
    )
    if opportunity.status != OpportunityStatus.PUBLISHED.value and not access.is_coordinator:
        raise HTTPException(status_code=404, detail="Opportunity not found")
    return opportunity


# ---------------------------------------------------------------------------
# Opportunity CRUD
# ---------------------------------------------------------------------------


@router.get("", response_model=OpportunityListResponse)
async def list_opportunities_endpoint(
    type: Optional[OpportunityType] = None,
    status: OpportunityStatus = OpportunityStatus.PUBLISHED,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    tags: Optional[List[str]] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    sort_by: OpportunitySortField = OpportunitySortField.START_DATE,
    sort_order: SortOrder = SortOrder.ASC,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    access: TenantAccess = Depends(get_tenant_access),
    session: AsyncSession = Depends(get_session),
):
    """List opportunities. Statuses other than PUBLISHED need coordinator access."""
    if status != OpportunityStatus.PUBLISHED and not access.is_coordinator:
        raise HTTPException(status_code=403, detail="Coordinator access required")

    opportunities, total = await opportunity_service.list_opportunities(
        session,
        access.tenant_id,
        type=type,
        status=status,
        from_date=from_date,
        to_date=to_date,
        tags=tags,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return OpportunityListResponse(
        data=await opportunity_service.enrich_opportunities(session, opportunities),
        total=total,
        has_more=has_more(offset, len(opportunities), total),
    )


@router.post("", response_model=OpportunityRead, status_code=201)
async def create_opportunity_endpoint(
    opportunity_in: OpportunityCreate,
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    """Create a draft opportunity."""
    opportunity = await opportunity_service.create_opportunity(
        session, access.tenant_id, opportunity_in
    )
    await session.commit()
    return opportunity_service.to_read(opportunity)


@router.get("/{opportunity_id}", response_model=OpportunityRead)
async def get_opportunity_endpoint(
    opportunity_id: uuid.UUID,
    access: TenantAccess = Depends(get_tenant_access),
    session: AsyncSession = Depends(get_session),
):
    opportunity = await _visible_opportunity(session, access, opportunity_id)
    return await opportunity_service.enrich_opportunity(session, opportunity)


@router.patch("/{opportunity_id}", response_model=OpportunityRead)
async def update_opportunity_endpoint(
    opportunity_id: uuid.UUID,
    opportunity_in: OpportunityUpdate,
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    """Update fields. A capacity change re-derives spots_remaining."""
    opportunity = await opportunity_service.get_opportunity_or_404(
        session, opportunity_id, access.tenant_id
    )
    opportunity = await opportunity_service.update_opportunity(
        session, opportunity, opportunity_in
    )
    await session.commit()
    return await opportunity_service.enrich_opportunity(session, opportunity)


@router.post("/{opportunity_id}/publish", response_model=OpportunityRead)
async def publish_opportunity_endpoint(
    opportunity_id: uuid.UUID,
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    opportunity = await opportunity_service.get_opportunity_or_404(
        session, opportunity_id, access.tenant_id
    )
    opportunity = await opportunity_service.set_status(
        session, opportunity, OpportunityStatus.PUBLISHED
    )
    await session.commit()
    return await opportunity_service.enrich_opportunity(session, opportunity)


@router.post("/{opportunity_id}/cancel", response_model=OpportunityRead)
async def cancel_opportunity_endpoint(
    opportunity_id: uuid.UUID,
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    opportunity = await opportunity_service.get_opportunity_or_404(
        session, opportunity_id, access.tenant_id
    )
    opportunity = await opportunity_service.set_status(
        session, opportunity, OpportunityStatus.CANCELLED
    )
    await session.commit()
    return await opportunity_service.enrich_opportunity(session, opportunity)


@router.delete("/{opportunity_id}", response_model=SuccessResponse)
async def delete_opportunity_endpoint(
    opportunity_id: uuid.UUID,
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    """Delete an opportunity and its signups."""
    opportunity = await opportunity_service.get_opportunity_or_404(
        session, opportunity_id, access.tenant_id
    )
    await opportunity_service.delete_opportunity(session, opportunity)
    await session.commit()
    return SuccessResponse()


# ---------------------------------------------------------------------------
# Signups on one opportunity
# ---------------------------------------------------------------------------


@router.post("/{opportunity_id}/signups", response_model=SignupRead, status_code=201)
async def apply_endpoint(
    opportunity_id: uuid.UUID,
    body: SignupApply,
    access: TenantAccess = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Apply to a published opportunity as the current user."""
    signup = await signup_service.apply_to_opportunity(
        session, access.tenant_id, opportunity_id, access.user, body
    )
    await session.commit()
    return signup_service.to_read(signup)


@router.get("/{opportunity_id}/signups", response_model=SignupListResponse)
async def list_opportunity_signups_endpoint(
    opportunity_id: uuid.UUID,
    status: Optional[SignupStatus] = None,
    sort_order: SortOrder = SortOrder.DESC,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    await opportunity_service.get_opportunity_or_404(session, opportunity_id, access.tenant_id)
    signups, total = await signup_service.list_signups(
        session,
        access.tenant_id,
        opportunity_id=opportunity_id,
        status=status,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return SignupListResponse(
        data=signups, total=total, has_more=has_more(offset, len(signups), total)
    )


@router.get("/{opportunity_id}/signups/mine", response_model=Optional[SignupRead])
async def get_my_signup_endpoint(
    opportunity_id: uuid.UUID,
    access: TenantAccess = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """The current user's signup for this opportunity, or null."""
    await opportunity_service.get_opportunity_or_404(session, opportunity_id, access.tenant_id)
    signup = await signup_service.get_signup(session, opportunity_id, access.user.id)
    return signup_service.to_read(signup) if signup else None
