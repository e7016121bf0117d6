"""Page-loader payloads: everything one tenant page renders, in one response."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from .common import SignupStatus
from .members import MemberResponse
from .opportunities import OpportunityRead
from .signups import ApplicationRead, MySignupRead, SignupRead
from .tenants import TenantResponse

HOME_PAGE_SIZE = 12
OPPORTUNITIES_PAGE_SIZE = 12
MANAGE_OPPORTUNITIES_LIMIT = 100
APPLICATIONS_LIMIT = 100
MEMBERS_PAGE_LIMIT = 50


class ApplicationsFilter(str, Enum):
    APPLIED = "APPLIED"
    APPROVED = "APPROVED"
    ALL = "all"

    def statuses(self) -> list[SignupStatus]:
        if self == ApplicationsFilter.ALL:
            return list(SignupStatus)
        return [SignupStatus(self.value)]


class TenantContext(BaseModel):
    """Branding, vocabulary, and the caller's standing within a tenant."""
    tenant: TenantResponse
    terminology: dict[str, str]
    features: dict[str, bool]
    membership: Optional[MemberResponse] = None
    is_admin: bool = False
    is_coordinator: bool = False
    is_volunteer: bool = False


class TenantsPage(BaseModel):
    tenants: List[TenantResponse]


class HomePage(BaseModel):
    context: TenantContext
    opportunities: List[OpportunityRead]
    has_more: bool


class OpportunitiesPage(BaseModel):
    context: TenantContext
    opportunities: List[OpportunityRead]
    total: int
    page: int
    page_size: int = OPPORTUNITIES_PAGE_SIZE


class OpportunityPage(BaseModel):
    context: TenantContext
    opportunity: OpportunityRead
    my_signup: Optional[SignupRead] = None


class ManageDashboardPage(BaseModel):
    context: TenantContext
    opportunities: List[OpportunityRead]
    members_total: int
    pending_applications_count: int


class ApplicationsPage(BaseModel):
    context: TenantContext
    applications: List[ApplicationRead]


class MembersPage(BaseModel):
    context: TenantContext
    members: List[MemberResponse]
    total: int


class MySignupsPage(BaseModel):
    context: TenantContext
    signups: List[MySignupRead]
