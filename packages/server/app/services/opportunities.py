"""
Opportunity service layer: CRUD, listing filters, and the capacity counter.

The spots_remaining counter is only ever changed with single conditional
UPDATE statements, so concurrent requests cannot push it below zero or
above capacity.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

import sqlalchemy as sa
import structlog
from fastapi import HTTPException
from sqlalchemy import case, func, or_, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.opportunity import Opportunity
from app.models.signup import OpportunitySignup
from volunteer_hub_shared.schemas.common import (
    ACTIVE_SIGNUP_STATUSES,
    OpportunityStatus,
    OpportunityType,
    SortOrder,
)
from volunteer_hub_shared.schemas.opportunities import (
    OpportunityCreate,
    OpportunityRead,
    OpportunitySortField,
    OpportunityUpdate,
)
from volunteer_hub_shared.schemas.signups import SPOT_HOLDING_STATUSES

log = structlog.get_logger()

SORT_COLUMNS = {
    OpportunitySortField.START_DATE: Opportunity.start_date,
    OpportunitySortField.CREATED_AT: Opportunity.created_at,
    OpportunitySortField.TITLE: Opportunity.title,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_opportunity_or_404(
    session: AsyncSession, opportunity_id: uuid.UUID, tenant_id: uuid.UUID
) -> Opportunity:
    opportunity = await session.get(Opportunity, opportunity_id)
    if not opportunity or opportunity.tenant_id != tenant_id:
        raise HTTPException(status_code=404, detail="Opportunity not found")
    return opportunity


async def active_signup_counts(
    session: AsyncSession, opportunity_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, int]:
    """APPLIED + APPROVED signups per opportunity, in one grouped query."""
    if not opportunity_ids:
        return {}
    result = await session.execute(
        select(OpportunitySignup.opportunity_id, func.count())
        .where(
            OpportunitySignup.opportunity_id.in_(list(opportunity_ids)),
            OpportunitySignup.status.in_([s.value for s in ACTIVE_SIGNUP_STATUSES]),
        )
        .group_by(OpportunitySignup.opportunity_id)
    )
    return {opportunity_id: count for opportunity_id, count in result.all()}


def to_read(opportunity: Opportunity, active_signup_count: int = 0) -> OpportunityRead:
    return OpportunityRead.model_validate(
        {**opportunity.model_dump(), "active_signup_count": active_signup_count}
    )


async def enrich_opportunity(session: AsyncSession, opportunity: Opportunity) -> OpportunityRead:
    counts = await active_signup_counts(session, [opportunity.id])
    return to_read(opportunity, counts.get(opportunity.id, 0))


async def enrich_opportunities(
    session: AsyncSession, opportunities: Sequence[Opportunity]
) -> list[OpportunityRead]:
    counts = await active_signup_counts(session, [o.id for o in opportunities])
    return [to_read(o, counts.get(o.id, 0)) for o in opportunities]


# ---------------------------------------------------------------------------
# Capacity counter
# ---------------------------------------------------------------------------


async def claim_spot(session: AsyncSession, opportunity_id: uuid.UUID) -> bool:
    """Take one spot. False when none are left; the counter is untouched then."""
    result = await session.execute(
        update(Opportunity)
        .where(
            Opportunity.id == opportunity_id,
            Opportunity.capacity > 0,
            Opportunity.spots_remaining > 0,
        )
        .values(spots_remaining=Opportunity.spots_remaining - 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def release_spot(session: AsyncSession, opportunity_id: uuid.UUID) -> bool:
    """Give one spot back, never exceeding capacity."""
    result = await session.execute(
        update(Opportunity)
        .where(
            Opportunity.id == opportunity_id,
            Opportunity.capacity > 0,
            Opportunity.spots_remaining < Opportunity.capacity,
        )
        .values(spots_remaining=Opportunity.spots_remaining + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _count_spot_holders(session: AsyncSession, opportunity_id: uuid.UUID) -> int:
    total = await session.scalar(
        select(func.count())
        .select_from(OpportunitySignup)
        .where(
            OpportunitySignup.opportunity_id == opportunity_id,
            OpportunitySignup.status.in_([s.value for s in SPOT_HOLDING_STATUSES]),
        )
    )
    return total or 0


async def _apply_capacity(
    session: AsyncSession, opportunity: Opportunity, new_capacity: int
) -> None:
    """Change capacity and re-derive spots_remaining from the filled count."""
    if new_capacity == 0:
        spots = 0
    elif opportunity.capacity == 0:
        # Unlimited until now: nothing was tracked, so count the holders
        spots = max(0, new_capacity - await _count_spot_holders(session, opportunity.id))
    else:
        filled = Opportunity.capacity - Opportunity.spots_remaining
        remaining = new_capacity - filled
        spots = case((remaining < 0, 0), else_=remaining)

    await session.execute(
        update(Opportunity)
        .where(Opportunity.id == opportunity.id)
        .values(capacity=new_capacity, spots_remaining=spots)
        .execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def tag_filter(tag: str, dialect: str) -> sa.ColumnElement[bool]:
    """Condition matching opportunities whose tags array contains tag.

    PostgreSQL uses JSONB containment. Elsewhere the array is stored as JSON
    text with non-ASCII escaped, so the quoted element is matched in that form.
    """
    if dialect == "postgresql":
        return sa.type_coerce(Opportunity.tags, JSONB).contains([tag])
    return sa.cast(Opportunity.tags, sa.Text).contains(json.dumps(tag), autoescape=True)


async def list_opportunities(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    *,
    type: Optional[OpportunityType] = None,
    status: Optional[OpportunityStatus] = OpportunityStatus.PUBLISHED,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    tags: Optional[list[str]] = None,
    search: Optional[str] = None,
    sort_by: OpportunitySortField = OpportunitySortField.START_DATE,
    sort_order: SortOrder = SortOrder.ASC,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Opportunity], int]:
    """Filtered, sorted page of a tenant's opportunities. status=None lists all."""
    conditions = [Opportunity.tenant_id == tenant_id]
    if status:
        conditions.append(Opportunity.status == status.value)
    if type:
        conditions.append(Opportunity.type == type.value)
    if from_date:
        conditions.append(Opportunity.start_date >= from_date)
    if to_date:
        conditions.append(Opportunity.start_date <= to_date)
    if search:
        conditions.append(
            or_(
                Opportunity.title.icontains(search, autoescape=True),
                Opportunity.description.icontains(search, autoescape=True),
            )
        )
    dialect = session.get_bind().dialect.name
    for tag in tags or []:
        conditions.append(tag_filter(tag, dialect))

    total = await session.scalar(
        select(func.count()).select_from(Opportunity).where(*conditions)
    )

    column = SORT_COLUMNS[sort_by]
    ordering = column.desc() if sort_order == SortOrder.DESC else column.asc()
    result = await session.execute(
        select(Opportunity)
        .where(*conditions)
        .order_by(ordering, Opportunity.id)
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def create_opportunity(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    opportunity_in: OpportunityCreate,
) -> Opportunity:
    """New opportunities start as drafts with every spot open."""
    opportunity = Opportunity(
        tenant_id=tenant_id,
        title=opportunity_in.title,
        description=opportunity_in.description,
        type=opportunity_in.type.value,
        status=OpportunityStatus.DRAFT.value,
        location=opportunity_in.location,
        address=opportunity_in.address,
        is_virtual=opportunity_in.is_virtual,
        start_date=opportunity_in.start_date,
        end_date=opportunity_in.end_date,
        recurrence=opportunity_in.recurrence,
        requirements=(
            opportunity_in.requirements.model_dump(exclude_none=True)
            if opportunity_in.requirements
            else {}
        ),
        capacity=opportunity_in.capacity,
        spots_remaining=opportunity_in.capacity,
        tags=opportunity_in.tags or [],
    )
    session.add(opportunity)
    await session.flush()

    log.info(
        "opportunity.created",
        opportunity_id=str(opportunity.id),
        tenant_id=str(tenant_id),
        capacity=opportunity.capacity,
    )
    return opportunity


async def update_opportunity(
    session: AsyncSession,
    opportunity: Opportunity,
    opportunity_in: OpportunityUpdate,
) -> Opportunity:
    data = opportunity_in.model_dump(exclude_unset=True)
    new_capacity = data.pop("capacity", None)

    if "requirements" in data:
        data["requirements"] = (
            opportunity_in.requirements.model_dump(exclude_none=True)
            if opportunity_in.requirements
            else {}
        )

    start = data.get("start_date") or opportunity.start_date
    end = data["end_date"] if "end_date" in data else opportunity.end_date
    if start and end and _naive(end) < _naive(start):
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")

    nullable = {"location", "address", "end_date", "recurrence"}
    for key, value in data.items():
        if value is None and key not in nullable:
            continue
        if hasattr(value, "value"):
            value = value.value
        setattr(opportunity, key, value)

    opportunity.updated_at = datetime.now(timezone.utc)
    session.add(opportunity)
    await session.flush()

    if new_capacity is not None and new_capacity != opportunity.capacity:
        await _apply_capacity(session, opportunity, new_capacity)
        await session.refresh(opportunity)
        log.info(
            "opportunity.capacity_changed",
            opportunity_id=str(opportunity.id),
            capacity=opportunity.capacity,
            spots_remaining=opportunity.spots_remaining,
        )

    log.info("opportunity.updated", opportunity_id=str(opportunity.id), fields=sorted(data))
    return opportunity


async def set_status(
    session: AsyncSession,
    opportunity: Opportunity,
    status: OpportunityStatus,
) -> Opportunity:
    """Publish, cancel, or complete an opportunity."""
    previous = opportunity.status
    opportunity.status = status.value
    opportunity.updated_at = datetime.now(timezone.utc)
    session.add(opportunity)
    await session.flush()

    log.info(
        "opportunity.status_changed",
        opportunity_id=str(opportunity.id),
        from_status=previous,
        to_status=status.value,
    )
    return opportunity


async def delete_opportunity(session: AsyncSession, opportunity: Opportunity) -> None:
    await session.delete(opportunity)
    await session.flush()
    log.info("opportunity.deleted", opportunity_id=str(opportunity.id))


def _naive(value: datetime) -> datetime:
    """Compare aware request values with naive values read back from SQLite."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
