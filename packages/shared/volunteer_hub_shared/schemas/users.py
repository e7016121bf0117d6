"""User profile schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr, Field, UUID4

# Invited users get a placeholder external id until their first sign-in
PENDING_EXTERNAL_ID_PREFIX = "pending_"


def pending_external_id(email: str) -> str:
    return f"{PENDING_EXTERNAL_ID_PREFIX}{email}"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserSyncRequest(BaseModel):
    """Profile claims pushed on sign-in. The external id comes from the token."""
    email: EmailStr
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class UserUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    skills: Optional[List[str]] = None
    availability: Optional[dict[str, List[str]]] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: UUID4
    external_id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    availability: dict[str, List[str]] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Trimmed user shape embedded in management listings."""
    id: UUID4
    name: Optional[str] = None
    email: str
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}
