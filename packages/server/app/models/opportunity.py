"""Opportunity model."""

from datetime import datetime
from typing import List, Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import JSONType, TimestampMixin, UUIDMixin


class Opportunity(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "opportunities"
    __table_args__ = (
        sa.CheckConstraint("capacity >= 0", name="ck_opportunities_capacity"),
        sa.CheckConstraint("spots_remaining >= 0", name="ck_opportunities_spots_remaining"),
    )

    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", ondelete="CASCADE", nullable=False, index=True)
    title: str = Field(nullable=False)
    description: str = Field(nullable=False)
    type: str = Field(nullable=False, default="EVENT")  # EVENT | SHIFT | PROJECT
    status: str = Field(nullable=False, default="DRAFT", index=True)  # DRAFT | PUBLISHED | CANCELLED | COMPLETED
    location: Optional[str] = None
    address: Optional[str] = None
    is_virtual: bool = Field(default=False, nullable=False)
    start_date: datetime = Field(nullable=False, index=True, sa_type=sa.DateTime(timezone=True))
    end_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    recurrence: Optional[str] = None
    requirements: dict = Field(default_factory=dict, sa_type=JSONType, nullable=False)
    capacity: int = Field(default=0, nullable=False)  # 0 = unlimited
    spots_remaining: int = Field(default=0, nullable=False)
    tags: List[str] = Field(default_factory=list, sa_type=JSONType, nullable=False)
