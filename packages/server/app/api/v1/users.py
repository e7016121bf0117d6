"""
User endpoints.

POST   /api/v1/users/sync        — Mirror the signed-in identity locally
GET    /api/v1/users/me          — Current user, or null when not synced/signed in
PATCH  /api/v1/users/me          — Update own profile
GET    /api/v1/users/{user_id}   — Get a user by id, or null
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Identity, get_current_user, get_identity, get_optional_user
from app.core.database import get_session
from app.models.user import User
from app.services import users as user_service
from volunteer_hub_shared.schemas.users import (
    UserResponse,
    UserSyncRequest,
    UserUpdateRequest,
)

router = APIRouter()


@router.post("/sync", response_model=UserResponse, tags=["Users"])
async def sync_user(
    body: UserSyncRequest,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Create or refresh the local user for the token's subject."""
    user = await user_service.sync_user(identity.subject, body, session)
    await session.commit()
    return UserResponse.model_validate(user)


@router.get("/me", response_model=Optional[UserResponse], tags=["Users"])
async def get_me(user: Optional[User] = Depends(get_optional_user)):
    return UserResponse.model_validate(user) if user else None


@router.patch("/me", response_model=UserResponse, tags=["Users"])
async def update_me(
    body: UserUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Update name, bio, skills, or availability."""
    user = await user_service.update_user(user, body, session)
    await session.commit()
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=Optional[UserResponse], tags=["Users"])
async def get_user(
    user_id: uuid.UUID,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.get_user_by_id(user_id, session)
    return UserResponse.model_validate(user) if user else None
