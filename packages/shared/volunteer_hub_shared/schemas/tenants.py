"""
Tenant-related Pydantic schemas shared between the server and page loaders.

Covers: tenant CRUD request/response, branding defaults, and the
terminology map tenants use to rename platform vocabulary.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl


# ---------------------------------------------------------------------------
# Branding & terminology
# ---------------------------------------------------------------------------

DEFAULT_PRIMARY_COLOR = "#3b82f6"
DEFAULT_ACCENT_COLOR = "#10b981"

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
SLUG_PATTERN = r"^[a-z0-9-]+$"

DEFAULT_TERMINOLOGY: dict[str, str] = {
    "volunteer": "Volunteer",
    "volunteers": "Volunteers",
    "opportunity": "Opportunity",
    "opportunities": "Opportunities",
    "organization": "Organization",
    "coordinator": "Coordinator",
    "signup": "Sign Up",
    "apply": "Apply",
}


def resolve_terminology(custom: Optional[dict[str, str]]) -> dict[str, str]:
    """Merge a tenant's custom terms over the defaults. Empty values are ignored."""
    resolved = dict(DEFAULT_TERMINOLOGY)
    for key, value in (custom or {}).items():
        if value:
            resolved[key] = value
    return resolved


def term(custom: Optional[dict[str, str]], key: str) -> str:
    """Look up one term: tenant override, then default, then the key itself."""
    if custom and custom.get(key):
        return custom[key]
    return DEFAULT_TERMINOLOGY.get(key) or key


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class TenantCreateRequest(BaseModel):
    slug: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=SLUG_PATTERN,
        description="URL-safe tenant identifier",
    )
    name: str = Field(..., min_length=1, max_length=100, description="Organization display name")
    logo: Optional[HttpUrl] = None
    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    accent_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)


class TenantUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    logo: Optional[HttpUrl] = Field(None, description="Send null to clear the logo")
    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    accent_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    terminology: Optional[dict[str, str]] = None
    features: Optional[dict[str, bool]] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TenantResponse(BaseModel):
    id: uuid.UUID
    slug: str
    name: str
    logo: Optional[str] = None
    primary_color: str
    accent_color: str
    terminology: dict[str, str] = Field(default_factory=dict)
    features: dict[str, bool] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TenantListResponse(BaseModel):
    data: list[TenantResponse]
