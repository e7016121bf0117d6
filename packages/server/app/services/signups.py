"""
Signup service layer: applications and the approval lifecycle.

Handles:
- Applying to published opportunities (one signup per user and opportunity)
- Status transitions with spot claims and releases on the opportunity
- Withdrawal by the volunteer
- Tenant-scoped listings for coordinators and cross-tenant listings for volunteers

Every transition updates the signup conditionally on the status it was read
with; a concurrent change makes the second request fail with 409.
"""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.base import utcnow
from app.models.opportunity import Opportunity
from app.models.signup import OpportunitySignup
from app.models.tenant import Tenant
from app.models.user import User
from app.services.opportunities import (
    claim_spot,
    enrich_opportunities,
    get_opportunity_or_404,
    release_spot,
)
from volunteer_hub_shared.schemas.common import OpportunityStatus, SignupStatus, SortOrder
from volunteer_hub_shared.schemas.opportunities import OpportunitySummary
from volunteer_hub_shared.schemas.signups import (
    SPOT_HOLDING_STATUSES,
    ApplicationRead,
    MySignupRead,
    SignupApply,
    SignupRead,
    SignupUpdate,
    spot_delta,
)
from volunteer_hub_shared.schemas.tenants import TenantResponse
from volunteer_hub_shared.schemas.users import UserResponse, UserSummary

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_signup_or_404(
    session: AsyncSession, signup_id: uuid.UUID, tenant_id: uuid.UUID
) -> tuple[OpportunitySignup, Opportunity]:
    """A signup and its opportunity, provided the opportunity is in the tenant."""
    result = await session.execute(
        select(OpportunitySignup, Opportunity)
        .join(Opportunity, Opportunity.id == OpportunitySignup.opportunity_id)
        .where(OpportunitySignup.id == signup_id, Opportunity.tenant_id == tenant_id)
    )
    row = result.one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Signup not found")
    signup, opportunity = row
    return signup, opportunity


def to_read(signup: OpportunitySignup, user: Optional[User] = None) -> SignupRead:
    return SignupRead(
        id=signup.id,
        opportunity_id=signup.opportunity_id,
        user_id=signup.user_id,
        status=signup.status,
        applied_at=signup.applied_at,
        approved_at=signup.approved_at,
        completed_at=signup.completed_at,
        notes=signup.notes,
        user=UserResponse.model_validate(user) if user else None,
    )


async def _set_status(
    session: AsyncSession,
    signup: OpportunitySignup,
    previous: SignupStatus,
    values: dict,
) -> None:
    """Write the new status only if nobody changed it since it was read."""
    result = await session.execute(
        update(OpportunitySignup)
        .where(
            OpportunitySignup.id == signup.id,
            OpportunitySignup.status == previous.value,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        log.warning("signup.concurrent_update", signup_id=str(signup.id))
        raise HTTPException(
            status_code=409, detail="Signup was modified by another request"
        )


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def apply_to_opportunity(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    opportunity_id: uuid.UUID,
    user: User,
    req: SignupApply,
) -> OpportunitySignup:
    opportunity = await get_opportunity_or_404(session, opportunity_id, tenant_id)
    if opportunity.status != OpportunityStatus.PUBLISHED.value:
        raise HTTPException(
            status_code=409, detail="Opportunity is not accepting applications"
        )

    if await get_signup(session, opportunity_id, user.id):
        raise HTTPException(
            status_code=409, detail="You have already applied to this opportunity"
        )

    signup = OpportunitySignup(
        opportunity_id=opportunity_id,
        user_id=user.id,
        status=SignupStatus.APPLIED.value,
        notes=req.notes,
    )
    session.add(signup)
    try:
        await session.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=409, detail="You have already applied to this opportunity"
        )

    log.info(
        "signup.applied",
        signup_id=str(signup.id),
        opportunity_id=str(opportunity_id),
        user_id=str(user.id),
    )
    return signup


async def update_signup(
    session: AsyncSession,
    signup: OpportunitySignup,
    opportunity: Opportunity,
    req: SignupUpdate,
) -> OpportunitySignup:
    """Move a signup to a new status and keep spots_remaining in step.

    - APPROVED from a non-holding status claims a spot (409 when full).
    - Leaving APPROVED for a non-holding status releases the spot.
    - COMPLETED is reachable only from APPROVED and keeps its spot.
    - COMPLETED is terminal: it may only be re-approved or re-completed.
    """
    current = SignupStatus(signup.status)
    target = req.status

    if target == SignupStatus.COMPLETED and current not in SPOT_HOLDING_STATUSES:
        raise HTTPException(
            status_code=409, detail="Only approved signups can be completed"
        )
    if current == SignupStatus.COMPLETED and target not in SPOT_HOLDING_STATUSES:
        raise HTTPException(
            status_code=409, detail="Completed signups cannot be reopened"
        )

    now = utcnow()
    values: dict = {"status": target.value}
    delta = spot_delta(current, target)
    if delta < 0:
        values["approved_at"] = now
    if target == SignupStatus.COMPLETED and current != SignupStatus.COMPLETED:
        values["completed_at"] = now
    if req.notes is not None:
        values["notes"] = req.notes

    await _set_status(session, signup, current, values)

    if opportunity.capacity > 0:
        if delta < 0 and not await claim_spot(session, opportunity.id):
            log.info(
                "signup.approval_rejected",
                signup_id=str(signup.id),
                opportunity_id=str(opportunity.id),
            )
            raise HTTPException(status_code=409, detail="No spots remaining")
        if delta > 0:
            await release_spot(session, opportunity.id)

    await session.refresh(signup)
    if delta:
        await session.refresh(opportunity)

    log.info(
        "signup.status_changed",
        signup_id=str(signup.id),
        opportunity_id=str(opportunity.id),
        from_status=current.value,
        to_status=target.value,
        spots_remaining=opportunity.spots_remaining,
    )
    return signup


async def withdraw_application(
    session: AsyncSession,
    signup: OpportunitySignup,
    opportunity: Opportunity,
) -> OpportunitySignup:
    """Cancel a signup, giving its spot back if it held one."""
    current = SignupStatus(signup.status)
    if current in (SignupStatus.COMPLETED, SignupStatus.CANCELLED):
        raise HTTPException(
            status_code=409, detail=f"Cannot withdraw a {current.value.lower()} signup"
        )

    await _set_status(session, signup, current, {"status": SignupStatus.CANCELLED.value})

    if current == SignupStatus.APPROVED and opportunity.capacity > 0:
        await release_spot(session, opportunity.id)
        await session.refresh(opportunity)

    await session.refresh(signup)
    log.info(
        "signup.withdrawn",
        signup_id=str(signup.id),
        opportunity_id=str(opportunity.id),
        previous_status=current.value,
    )
    return signup


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_signup(
    session: AsyncSession, opportunity_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[OpportunitySignup]:
    result = await session.execute(
        select(OpportunitySignup).where(
            OpportunitySignup.opportunity_id == opportunity_id,
            OpportunitySignup.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def list_signups(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    *,
    opportunity_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    status: Optional[SignupStatus] = None,
    sort_order: SortOrder = SortOrder.DESC,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[SignupRead], int]:
    """Signups in the tenant with their users, by applied_at."""
    conditions = [Opportunity.tenant_id == tenant_id]
    if opportunity_id:
        conditions.append(OpportunitySignup.opportunity_id == opportunity_id)
    if user_id:
        conditions.append(OpportunitySignup.user_id == user_id)
    if status:
        conditions.append(OpportunitySignup.status == status.value)

    total = await session.scalar(
        select(func.count())
        .select_from(OpportunitySignup)
        .join(Opportunity, Opportunity.id == OpportunitySignup.opportunity_id)
        .where(*conditions)
    )

    ordering = (
        OpportunitySignup.applied_at.asc()
        if sort_order == SortOrder.ASC
        else OpportunitySignup.applied_at.desc()
    )
    result = await session.execute(
        select(OpportunitySignup, User)
        .join(Opportunity, Opportunity.id == OpportunitySignup.opportunity_id)
        .join(User, User.id == OpportunitySignup.user_id)
        .where(*conditions)
        .order_by(ordering, OpportunitySignup.id)
        .offset(offset)
        .limit(limit)
    )
    return [to_read(s, u) for s, u in result.all()], total or 0


async def get_my_signups(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    status: Optional[SignupStatus] = None,
    tenant_id: Optional[uuid.UUID] = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[MySignupRead], int]:
    """The user's signups with opportunity and tenant, newest first.

    Cancelled signups are left out unless that status is asked for.
    """
    conditions = [OpportunitySignup.user_id == user_id]
    if status:
        conditions.append(OpportunitySignup.status == status.value)
    else:
        conditions.append(OpportunitySignup.status != SignupStatus.CANCELLED.value)
    if tenant_id:
        conditions.append(Opportunity.tenant_id == tenant_id)

    total = await session.scalar(
        select(func.count())
        .select_from(OpportunitySignup)
        .join(Opportunity, Opportunity.id == OpportunitySignup.opportunity_id)
        .where(*conditions)
    )
    result = await session.execute(
        select(OpportunitySignup, Opportunity, Tenant)
        .join(Opportunity, Opportunity.id == OpportunitySignup.opportunity_id)
        .join(Tenant, Tenant.id == Opportunity.tenant_id)
        .where(*conditions)
        .order_by(OpportunitySignup.applied_at.desc(), OpportunitySignup.id)
        .offset(offset)
        .limit(limit)
    )
    rows = result.all()
    opportunities = await enrich_opportunities(session, [o for _, o, _ in rows])

    signups = []
    for (signup, _, tenant), opportunity in zip(rows, opportunities):
        signups.append(
            MySignupRead(
                **to_read(signup).model_dump(exclude={"user", "opportunity"}),
                opportunity=opportunity,
                tenant=TenantResponse.model_validate(tenant),
            )
        )
    return signups, total or 0


async def list_applications(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    statuses: Sequence[SignupStatus],
    limit: int,
) -> list[ApplicationRead]:
    """Signups for the coordinator review screen, newest first."""
    result = await session.execute(
        select(OpportunitySignup, User, Opportunity)
        .join(Opportunity, Opportunity.id == OpportunitySignup.opportunity_id)
        .join(User, User.id == OpportunitySignup.user_id)
        .where(
            Opportunity.tenant_id == tenant_id,
            OpportunitySignup.status.in_([s.value for s in statuses]),
        )
        .order_by(OpportunitySignup.applied_at.desc(), OpportunitySignup.id)
        .limit(limit)
    )
    return [
        ApplicationRead(
            id=signup.id,
            status=signup.status,
            applied_at=signup.applied_at,
            approved_at=signup.approved_at,
            notes=signup.notes,
            user=UserSummary.model_validate(user),
            opportunity=OpportunitySummary.model_validate(opportunity),
        )
        for signup, user, opportunity in result.all()
    ]


async def count_signups(
    session: AsyncSession, tenant_id: uuid.UUID, status: SignupStatus
) -> int:
    total = await session.scalar(
        select(func.count())
        .select_from(OpportunitySignup)
        .join(Opportunity, Opportunity.id == OpportunitySignup.opportunity_id)
        .where(
            Opportunity.tenant_id == tenant_id,
            OpportunitySignup.status == status.value,
        )
    )
    return total or 0
