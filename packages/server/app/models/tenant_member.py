"""Tenant membership (join table between users and tenants)."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class TenantMember(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenant_members"
    __table_args__ = (sa.UniqueConstraint("tenant_id", "user_id", name="uq_tenant_members_tenant_user"),)

    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", ondelete="CASCADE", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", ondelete="CASCADE", nullable=False, index=True)
    role: str = Field(nullable=False, default="VOLUNTEER")  # ADMIN | COORDINATOR | VOLUNTEER
    status: str = Field(nullable=False, default="PENDING")  # PENDING | ACTIVE | INACTIVE
