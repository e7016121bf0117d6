"""Opportunity signup model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class OpportunitySignup(UUIDMixin, SQLModel, table=True):
    __tablename__ = "opportunity_signups"
    __table_args__ = (
        sa.UniqueConstraint("opportunity_id", "user_id", name="uq_opportunity_signups_opportunity_user"),
    )

    opportunity_id: uuid.UUID = Field(
        foreign_key="opportunities.id", ondelete="CASCADE", nullable=False, index=True
    )
    user_id: uuid.UUID = Field(foreign_key="users.id", ondelete="CASCADE", nullable=False, index=True)
    status: str = Field(nullable=False, default="APPLIED", index=True)
    applied_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
    approved_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    notes: Optional[str] = None
