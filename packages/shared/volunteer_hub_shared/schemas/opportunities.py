"""Opportunity schemas and listing options."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4, model_validator

from .common import OpportunityStatus, OpportunityType


class OpportunitySortField(str, Enum):
    START_DATE = "start_date"
    CREATED_AT = "created_at"
    TITLE = "title"


class Requirements(BaseModel):
    skills: Optional[List[str]] = None
    min_age: Optional[int] = Field(default=None, ge=0)
    background_check: Optional[bool] = None


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

class OpportunityCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    type: OpportunityType = OpportunityType.EVENT
    location: Optional[str] = None
    address: Optional[str] = None
    is_virtual: bool = False
    start_date: datetime
    end_date: Optional[datetime] = None
    recurrence: Optional[str] = None
    requirements: Optional[Requirements] = None
    capacity: int = Field(default=0, ge=0, description="0 means unlimited")
    tags: Optional[List[str]] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "OpportunityCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class OpportunityUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    type: Optional[OpportunityType] = None
    status: Optional[OpportunityStatus] = None
    location: Optional[str] = None
    address: Optional[str] = None
    is_virtual: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    recurrence: Optional[str] = None
    requirements: Optional[Requirements] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None


class OpportunityRead(BaseModel):
    id: UUID4
    tenant_id: UUID4
    title: str
    description: str
    type: OpportunityType
    status: OpportunityStatus
    location: Optional[str] = None
    address: Optional[str] = None
    is_virtual: bool
    start_date: datetime
    end_date: Optional[datetime] = None
    recurrence: Optional[str] = None
    requirements: Requirements = Field(default_factory=Requirements)
    capacity: int
    spots_remaining: int
    tags: List[str] = Field(default_factory=list)
    active_signup_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OpportunitySummary(BaseModel):
    id: UUID4
    title: str
    start_date: datetime

    model_config = {"from_attributes": True}


class OpportunityListResponse(BaseModel):
    data: List[OpportunityRead]
    total: int
    has_more: bool
