from enum import Enum

from pydantic import BaseModel


class MemberRole(str, Enum):
    ADMIN = "ADMIN"
    COORDINATOR = "COORDINATOR"
    VOLUNTEER = "VOLUNTEER"


class MemberStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class OpportunityType(str, Enum):
    EVENT = "EVENT"
    SHIFT = "SHIFT"
    PROJECT = "PROJECT"


class OpportunityStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class SignupStatus(str, Enum):
    APPLIED = "APPLIED"
    APPROVED = "APPROVED"
    WAITLISTED = "WAITLISTED"
    DECLINED = "DECLINED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Signups counted against an opportunity in listings
ACTIVE_SIGNUP_STATUSES: list[SignupStatus] = [
    SignupStatus.APPLIED,
    SignupStatus.APPROVED,
]

# Roles allowed to manage opportunities, signups, and members
MANAGER_ROLES: list[MemberRole] = [MemberRole.ADMIN, MemberRole.COORDINATOR]


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SuccessResponse(BaseModel):
    success: bool = True


def has_more(offset: int, returned: int, total: int) -> bool:
    """True when rows remain past the current page."""
    return offset + returned < total
