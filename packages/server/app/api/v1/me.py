"""
Cross-tenant views of the current user: signups and memberships.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import members as member_service
from app.services import signups as signup_service
from volunteer_hub_shared.schemas.common import SignupStatus, has_more
from volunteer_hub_shared.schemas.members import MembershipListResponse
from volunteer_hub_shared.schemas.signups import MySignupListResponse

router = APIRouter()


@router.get("/signups", response_model=MySignupListResponse, tags=["Me"])
async def list_my_signups(
    status: Optional[SignupStatus] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """The current user's signups in every tenant. Cancelled ones only on request."""
    signups, total = await signup_service.get_my_signups(
        session, user.id, status=status, limit=limit, offset=offset
    )
    return MySignupListResponse(
        data=signups, total=total, has_more=has_more(offset, len(signups), total)
    )


@router.get("/memberships", response_model=MembershipListResponse, tags=["Me"])
async def list_my_memberships(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Active memberships with their tenants."""
    return MembershipListResponse(
        data=await member_service.list_user_memberships(session, user.id)
    )
