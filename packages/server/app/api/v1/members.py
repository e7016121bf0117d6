"""
Member endpoints: roster, invitations, role and status changes.

GET    /members                   — List members (Coordinator)
GET    /members/by-user/{user_id} — One user's membership, or null (Member)
POST   /members                   — Invite by email (Admin)
PATCH  /members/{member_id}       — Change role or status (Admin)
DELETE /members/{member_id}       — Remove from the tenant (Admin)
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import TenantAccess, require_admin, require_coordinator, require_member
from app.core.database import get_session
from app.services import members as member_service
from volunteer_hub_shared.schemas.common import (
    MemberRole,
    MemberStatus,
    SuccessResponse,
    has_more,
)
from volunteer_hub_shared.schemas.members import (
    MemberInviteRequest,
    MemberListResponse,
    MemberResponse,
    MemberUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=MemberListResponse)
async def list_members_endpoint(
    role: Optional[MemberRole] = None,
    status: Optional[MemberStatus] = None,
    search: Optional[str] = Query(None, max_length=200),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    access: TenantAccess = Depends(require_coordinator),
    session: AsyncSession = Depends(get_session),
):
    """List members with their profiles. search matches name or email."""
    members, total = await member_service.list_members(
        session,
        access.tenant_id,
        role=role,
        status=status,
        search=search,
        limit=limit,
        offset=offset,
    )
    return MemberListResponse(
        data=members, total=total, has_more=has_more(offset, len(members), total)
    )


@router.get("/by-user/{user_id}", response_model=Optional[MemberResponse])
async def get_member_endpoint(
    user_id: uuid.UUID,
    access: TenantAccess = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await member_service.get_member(session, access.tenant_id, user_id)


@router.post("", response_model=MemberResponse, status_code=201)
async def invite_member_endpoint(
    body: MemberInviteRequest,
    access: TenantAccess = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Invite someone by email. Unknown emails get a placeholder user."""
    member, user = await member_service.invite_member(session, access.tenant_id, body)
    await session.commit()
    return member_service.to_response(member, user)


@router.patch("/{member_id}", response_model=MemberResponse)
async def update_member_endpoint(
    member_id: uuid.UUID,
    body: MemberUpdateRequest,
    access: TenantAccess = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    member = await member_service.get_member_or_404(session, member_id, access.tenant_id)
    member = await member_service.update_member(session, member, body)
    await session.commit()
    return member_service.to_response(member)


@router.delete("/{member_id}", response_model=SuccessResponse)
async def remove_member_endpoint(
    member_id: uuid.UUID,
    access: TenantAccess = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    member = await member_service.get_member_or_404(session, member_id, access.tenant_id)
    await member_service.remove_member(session, member)
    await session.commit()
    return SuccessResponse()
