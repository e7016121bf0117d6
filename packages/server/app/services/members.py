"""
Membership service: invitations, joins, role and status changes.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.tenant import Tenant
from app.models.tenant_member import TenantMember
from app.models.user import User
from app.services.users import get_or_create_invited_user
from volunteer_hub_shared.schemas.common import MemberRole, MemberStatus
from volunteer_hub_shared.schemas.members import (
    MemberInviteRequest,
    MemberResponse,
    MemberUpdateRequest,
)
from volunteer_hub_shared.schemas.tenants import TenantResponse
from volunteer_hub_shared.schemas.users import UserResponse

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_response(
    member: TenantMember,
    user: Optional[User] = None,
    tenant: Optional[Tenant] = None,
) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        tenant_id=member.tenant_id,
        user_id=member.user_id,
        role=member.role,
        status=member.status,
        created_at=member.created_at,
        updated_at=member.updated_at,
        user=UserResponse.model_validate(user) if user else None,
        tenant=TenantResponse.model_validate(tenant) if tenant else None,
    )


async def get_member_or_404(
    session: AsyncSession, member_id: uuid.UUID, tenant_id: uuid.UUID
) -> TenantMember:
    member = await session.get(TenantMember, member_id)
    if not member or member.tenant_id != tenant_id:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


async def _find_membership(
    session: AsyncSession, tenant_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[TenantMember]:
    result = await session.execute(
        select(TenantMember).where(
            TenantMember.tenant_id == tenant_id,
            TenantMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_member(
    session: AsyncSession, tenant_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[MemberResponse]:
    """A user's membership in the tenant with user and tenant, or None."""
    result = await session.execute(
        select(TenantMember, User, Tenant)
        .join(User, User.id == TenantMember.user_id)
        .join(Tenant, Tenant.id == TenantMember.tenant_id)
        .where(TenantMember.tenant_id == tenant_id, TenantMember.user_id == user_id)
    )
    row = result.one_or_none()
    if not row:
        return None
    member, user, tenant = row
    return to_response(member, user, tenant)


async def list_members(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    *,
    role: Optional[MemberRole] = None,
    status: Optional[MemberStatus] = None,
    search: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[MemberResponse], int]:
    """Members with their users, newest first. Returns (page, total)."""
    conditions = [TenantMember.tenant_id == tenant_id]
    if role:
        conditions.append(TenantMember.role == role.value)
    if status:
        conditions.append(TenantMember.status == status.value)
    if search:
        conditions.append(
            or_(
                User.name.icontains(search, autoescape=True),
                User.email.icontains(search, autoescape=True),
            )
        )

    total = await session.scalar(
        select(func.count())
        .select_from(TenantMember)
        .join(User, User.id == TenantMember.user_id)
        .where(*conditions)
    )
    result = await session.execute(
        select(TenantMember, User)
        .join(User, User.id == TenantMember.user_id)
        .where(*conditions)
        .order_by(TenantMember.created_at.desc(), TenantMember.id)
        .offset(offset)
        .limit(limit)
    )
    return [to_response(m, u) for m, u in result.all()], total or 0


async def count_active_members(session: AsyncSession, tenant_id: uuid.UUID) -> int:
    total = await session.scalar(
        select(func.count())
        .select_from(TenantMember)
        .where(
            TenantMember.tenant_id == tenant_id,
            TenantMember.status == MemberStatus.ACTIVE.value,
        )
    )
    return total or 0


async def list_user_memberships(
    session: AsyncSession, user_id: uuid.UUID
) -> list[MemberResponse]:
    """A user's active memberships with their tenants, ordered by tenant name."""
    result = await session.execute(
        select(TenantMember, Tenant)
        .join(Tenant, Tenant.id == TenantMember.tenant_id)
        .where(
            TenantMember.user_id == user_id,
            TenantMember.status == MemberStatus.ACTIVE.value,
        )
        .order_by(Tenant.name)
    )
    return [to_response(m, tenant=t) for m, t in result.all()]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def invite_member(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    req: MemberInviteRequest,
) -> tuple[TenantMember, User]:
    """Invite by email. The membership stays PENDING until the user joins."""
    user = await get_or_create_invited_user(req.email, session)

    if await _find_membership(session, tenant_id, user.id):
        raise HTTPException(
            status_code=409, detail="User is already a member of this organization"
        )

    member = TenantMember(
        tenant_id=tenant_id,
        user_id=user.id,
        role=req.role.value,
        status=MemberStatus.PENDING.value,
    )
    session.add(member)
    try:
        await session.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=409, detail="User is already a member of this organization"
        )

    log.info(
        "member.invited",
        member_id=str(member.id),
        tenant_id=str(tenant_id),
        user_id=str(user.id),
        role=req.role.value,
    )
    return member, user


async def update_member(
    session: AsyncSession,
    member: TenantMember,
    req: MemberUpdateRequest,
) -> TenantMember:
    if req.role is not None:
        member.role = req.role.value
    if req.status is not None:
        member.status = req.status.value

    member.updated_at = datetime.now(timezone.utc)
    session.add(member)
    await session.flush()

    log.info(
        "member.updated",
        member_id=str(member.id),
        role=member.role,
        status=member.status,
    )
    return member


async def remove_member(session: AsyncSession, member: TenantMember) -> None:
    await session.delete(member)
    await session.flush()
    log.info("member.removed", member_id=str(member.id), tenant_id=str(member.tenant_id))


async def join_tenant(
    session: AsyncSession,
    tenant: Tenant,
    user: User,
) -> TenantMember:
    """Join as a volunteer, accept a pending invite, or reactivate."""
    existing = await _find_membership(session, tenant.id, user.id)

    if existing is not None:
        if existing.status == MemberStatus.ACTIVE.value:
            raise HTTPException(
                status_code=409, detail="You are already a member of this organization"
            )
        previous = existing.status
        existing.status = MemberStatus.ACTIVE.value
        existing.updated_at = datetime.now(timezone.utc)
        session.add(existing)
        await session.flush()
        log.info(
            "member.activated",
            member_id=str(existing.id),
            tenant_id=str(tenant.id),
            previous_status=previous,
        )
        return existing

    member = TenantMember(
        tenant_id=tenant.id,
        user_id=user.id,
        role=MemberRole.VOLUNTEER.value,
        status=MemberStatus.ACTIVE.value,
    )
    session.add(member)
    try:
        await session.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=409, detail="You are already a member of this organization"
        )

    log.info("member.joined", member_id=str(member.id), tenant_id=str(tenant.id))
    return member
