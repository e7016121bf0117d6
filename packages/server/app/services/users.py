"""
User service: mirror identity-provider users locally and manage profiles.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.user import User
from volunteer_hub_shared.schemas.users import (
    PENDING_EXTERNAL_ID_PREFIX,
    UserSyncRequest,
    UserUpdateRequest,
    pending_external_id,
)

log = structlog.get_logger()


async def get_user_by_external_id(external_id: str, session: AsyncSession) -> Optional[User]:
    result = await session.execute(select(User).where(User.external_id == external_id))
    return result.scalar_one_or_none()


async def get_user_by_email(email: str, session: AsyncSession) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(user_id: uuid.UUID, session: AsyncSession) -> Optional[User]:
    return await session.get(User, user_id)


async def sync_user(
    external_id: str,
    req: UserSyncRequest,
    session: AsyncSession,
) -> User:
    """Create or refresh the local mirror of a signed-in user.

    Lookup order:
    1. By email: an invited placeholder gets linked to the real external id.
    2. By external id: the user changed their email at the provider.
    3. Otherwise a new user is created.
    """
    user = await get_user_by_email(req.email, session)
    if user is not None:
        if user.external_id.startswith(PENDING_EXTERNAL_ID_PREFIX):
            user.external_id = external_id
            log.info("user.invite_linked", user_id=str(user.id))
        elif user.external_id != external_id:
            raise HTTPException(status_code=409, detail="Email is linked to another account")
    else:
        user = await get_user_by_external_id(external_id, session)
        if user is not None:
            user.email = req.email

    if user is None:
        user = User(
            external_id=external_id,
            email=req.email,
            name=req.name,
            avatar_url=req.avatar_url,
        )
        session.add(user)
        try:
            await session.flush()
        except IntegrityError:
            raise HTTPException(status_code=409, detail="User already exists")
        log.info("user.created", user_id=str(user.id))
        return user

    user.name = req.name if req.name is not None else user.name
    user.avatar_url = req.avatar_url if req.avatar_url is not None else user.avatar_url
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    await session.flush()
    log.info("user.synced", user_id=str(user.id))
    return user


async def get_or_create_invited_user(email: str, session: AsyncSession) -> User:
    """Find a user by email, or create a placeholder until they first sign in."""
    user = await get_user_by_email(email, session)
    if user is not None:
        return user
    user = User(external_id=pending_external_id(email), email=email)
    session.add(user)
    await session.flush()
    log.info("user.placeholder_created", user_id=str(user.id))
    return user


async def update_user(
    user: User,
    req: UserUpdateRequest,
    session: AsyncSession,
) -> User:
    """Update the caller's own profile fields."""
    data = req.model_dump(exclude_unset=True)
    for key, value in data.items():
        if value is None:
            continue
        setattr(user, key, value)

    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    await session.flush()

    log.info("user.updated", user_id=str(user.id), fields=sorted(data))
    return user
