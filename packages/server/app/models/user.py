"""User model, mirrored from the external identity provider."""

from typing import List, Optional

from sqlmodel import Field, SQLModel

from .base import JSONType, TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    external_id: str = Field(unique=True, nullable=False, index=True)  # IdP subject or pending_<email>
    email: str = Field(unique=True, nullable=False, index=True)
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list, sa_type=JSONType, nullable=False)
    availability: dict = Field(default_factory=dict, sa_type=JSONType, nullable=False)
