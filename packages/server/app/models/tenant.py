"""Tenant (volunteer organization) model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import JSONType, TimestampMixin, UUIDMixin


class Tenant(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    slug: str = Field(unique=True, nullable=False, index=True)
    name: str = Field(nullable=False, index=True)
    logo: Optional[str] = None
    primary_color: str = Field(default="#3b82f6", nullable=False)
    accent_color: str = Field(default="#10b981", nullable=False)
    terminology: dict = Field(default_factory=dict, sa_type=JSONType, nullable=False)
    features: dict = Field(default_factory=dict, sa_type=JSONType, nullable=False)
