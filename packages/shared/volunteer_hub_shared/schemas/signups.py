"""Signup schemas and the spot-holding rules of the approval lifecycle."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4

from .common import SignupStatus
from .opportunities import OpportunityRead, OpportunitySummary
from .tenants import TenantResponse
from .users import UserResponse, UserSummary


# ---------------------------------------------------------------------------
# Capacity bookkeeping
# ---------------------------------------------------------------------------

# Statuses occupying one unit of an opportunity's capacity. COMPLETED keeps
# the spot its APPROVED signup took.
SPOT_HOLDING_STATUSES: frozenset[SignupStatus] = frozenset(
    {SignupStatus.APPROVED, SignupStatus.COMPLETED}
)


def spot_delta(current: SignupStatus, target: SignupStatus) -> int:
    """Change to spots_remaining when a signup moves from current to target.

    -1 claims a spot, +1 releases one, 0 leaves the counter alone.
    Only APPROVED claims; moving from a holding status to a non-holding one
    releases.
    """
    if target == SignupStatus.APPROVED and current not in SPOT_HOLDING_STATUSES:
        return -1
    if current in SPOT_HOLDING_STATUSES and target not in SPOT_HOLDING_STATUSES:
        return 1
    return 0


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SignupApply(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=500)


class SignupUpdate(BaseModel):
    status: SignupStatus
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class SignupRead(BaseModel):
    id: UUID4
    opportunity_id: UUID4
    user_id: UUID4
    status: SignupStatus
    applied_at: datetime
    approved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    user: Optional[UserResponse] = None
    opportunity: Optional[OpportunityRead] = None

    model_config = {"from_attributes": True}


class SignupListResponse(BaseModel):
    data: List[SignupRead]
    total: int
    has_more: bool


class MySignupRead(SignupRead):
    """A signup listed for its owner, with the opportunity's tenant."""
    tenant: Optional[TenantResponse] = None


class MySignupListResponse(BaseModel):
    data: List[MySignupRead]
    total: int
    has_more: bool


class ApplicationRead(BaseModel):
    """Signup row on the coordinator's applications page."""
    id: UUID4
    status: SignupStatus
    applied_at: datetime
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None
    user: UserSummary
    opportunity: OpportunitySummary

    model_config = {"from_attributes": True}
