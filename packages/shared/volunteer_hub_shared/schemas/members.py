"""Tenant membership schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr, UUID4

from .common import MemberRole, MemberStatus
from .tenants import TenantResponse
from .users import UserResponse


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class MemberInviteRequest(BaseModel):
    """Invite a person to the tenant by email."""
    email: EmailStr
    role: MemberRole = MemberRole.VOLUNTEER


class MemberUpdateRequest(BaseModel):
    role: Optional[MemberRole] = None
    status: Optional[MemberStatus] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class MemberResponse(BaseModel):
    id: UUID4
    tenant_id: UUID4
    user_id: UUID4
    role: MemberRole
    status: MemberStatus
    created_at: datetime
    updated_at: datetime
    user: Optional[UserResponse] = None
    tenant: Optional[TenantResponse] = None

    model_config = {"from_attributes": True}


class MemberListResponse(BaseModel):
    data: List[MemberResponse]
    total: int
    has_more: bool


class MembershipListResponse(BaseModel):
    """The caller's own memberships, each with its tenant."""
    data: List[MemberResponse]
