"""
Signup endpoints: the coordinator review queue and status transitions.

Transitions keep the opportunity's spots_remaining in step:
- APPROVED claims a spot (409 "No spots remaining" when full)
- Leaving APPROVED for APPLIED, WAITLISTED, DECLINED or CANCELLED releases it
- COMPLETED keeps the spot of the approval it follows
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import TenantAccess, require_coordinator, require_user
from app.core.database import get_session
from app.services import signups as signup_service
from volunteer_hub_shared.schemas.common import SignupStatus, SortOrder, has_more
from volunteer_hub_shared.schemas.signups import (
    SignupListResponse,
    SignupRead,
    SignupUpdate,
)

router = APIRouter()


@router.get("", response_model=SignupListResponse)
async def list_signups_endpoint(
    opportunity_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    status: Optional[SignupStatus] = None,
    sort_order: SortOrder = SortOrder.DESC,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    """List signups across the tenant's opportunities."""
    signups, total = await signup_service.list_signups(
        session,
        access.tenant_id,
        opportunity_id=opportunity_id,
        user_id=user_id,
        status=status,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return SignupListResponse(
        data=signups, total=total, has_more=has_more(offset, len(signups), total)
    )


@router.patch("/{signup_id}", response_model=SignupRead)
async def update_signup_endpoint(
    signup_id: uuid.UUID,
    body: SignupUpdate,
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    """Approve, decline, waitlist, or complete a signup."""
    signup, opportunity = await signup_service.get_signup_or_404(
        session, signup_id, access.tenant_id
    )
    signup = await signup_service.update_signup(session, signup, opportunity, body)
    await session.commit()
    return signup_service.to_read(signup)


@router.post("/{signup_id}/withdraw", response_model=SignupRead)
async def withdraw_signup_endpoint(
    signup_id: uuid.UUID,
    access: TenantAccess = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Withdraw an application. Allowed for its owner and for coordinators."""
    signup, opportunity = await signup_service.get_signup_or_404(
        session, signup_id, access.tenant_id
    )
    if signup.user_id != access.user_id and not access.is_coordinator:
        raise HTTPException(status_code=403, detail="Not your signup")

    signup = await signup_service.withdraw_application(session, signup, opportunity)
    await session.commit()
    return signup_service.to_read(signup)
