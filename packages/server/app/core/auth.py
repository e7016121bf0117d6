"""
Authentication and authorization for Volunteer Hub.

Sign-in is handled by an external identity provider. Requests carry the
provider's JWT as a bearer token; the token subject is the user's
external id, which maps to the local User mirror created by /users/sync.

Tenant roles come from TenantMember rows; only ACTIVE memberships grant
access.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session
from app.models.tenant import Tenant
from app.models.tenant_member import TenantMember
from app.models.user import User
from volunteer_hub_shared.schemas.common import MANAGER_ROLES, MemberRole, MemberStatus

log = structlog.get_logger()
settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Identity tokens
# ---------------------------------------------------------------------------


class Identity:
    """Verified claims from an identity provider token."""

    def __init__(self, claims: dict[str, Any]):
        self.claims = claims
        self.subject: str = claims["sub"]
        self.email: Optional[str] = claims.get("email")
        self.name: Optional[str] = claims.get("name")


def decode_identity_token(token: str) -> dict[str, Any]:
    """Verify a provider token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.auth_jwt_algorithm],
        audience=settings.auth_audience,
        options={"verify_aud": settings.auth_audience is not None, "require": ["sub", "exp"]},
    )


def create_identity_token(
    subject: str,
    *,
    email: str | None = None,
    name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token the way the identity provider would (local development only)."""
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
    }
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    if settings.auth_audience:
        payload["aud"] = settings.auth_audience
    return jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Require a valid bearer token."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        return Identity(decode_identity_token(credentials.credentials))
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


async def _user_for_identity(identity: Identity, session: AsyncSession) -> Optional[User]:
    result = await session.execute(select(User).where(User.external_id == identity.subject))
    return result.scalar_one_or_none()


async def get_current_user(
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Require a signed-in user that has been synced locally."""
    user = await _user_for_identity(identity, session)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """The signed-in user, or None for anonymous requests. Bad tokens are still rejected."""
    if credentials is None:
        return None
    identity = await get_identity(credentials)
    return await _user_for_identity(identity, session)


# ---------------------------------------------------------------------------
# Tenant scoping
# ---------------------------------------------------------------------------


class TenantAccess:
    """A resolved tenant plus the caller's standing in it."""

    def __init__(
        self,
        tenant: Tenant,
        user: Optional[User] = None,
        membership: Optional[TenantMember] = None,
    ):
        self.tenant = tenant
        self.user = user
        self.membership = membership
        self.tenant_id = tenant.id
        self.user_id = user.id if user else None

    @property
    def is_member(self) -> bool:
        return (
            self.membership is not None
            and self.membership.status == MemberStatus.ACTIVE.value
        )

    @property
    def role(self) -> Optional[MemberRole]:
        if not self.is_member:
            return None
        return MemberRole(self.membership.role)

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN

    @property
    def is_coordinator(self) -> bool:
        return self.role in MANAGER_ROLES


async def resolve_tenant(tenant_slug: str, session: AsyncSession) -> Tenant:
    """Resolve a tenant by slug, raise 404 if not found."""
    result = await session.execute(select(Tenant).where(Tenant.slug == tenant_slug))
    tenant = result.scalar_one_or_none()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


async def get_tenant_access(
    tenantSlug: str,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> TenantAccess:
    """Resolve the tenant in the path and the caller's membership, if any."""
    tenant = await resolve_tenant(tenantSlug, session)
    membership = None
    if user is not None:
        result = await session.execute(
            select(TenantMember).where(
                TenantMember.tenant_id == tenant.id,
                TenantMember.user_id == user.id,
            )
        )
        membership = result.scalar_one_or_none()
    return TenantAccess(tenant=tenant, user=user, membership=membership)


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks)
# ---------------------------------------------------------------------------


async def require_user(
    access: TenantAccess = Depends(get_tenant_access),
) -> TenantAccess:
    """Any signed-in user, member or not."""
    if access.user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return access


async def require_member(
    access: TenantAccess = Depends(require_user),
) -> TenantAccess:
    """Requires an active membership in the tenant."""
    if not access.is_member:
        raise HTTPException(status_code=403, detail="Membership required")
    return access


async def require_coordinator(
    access: TenantAccess = Depends(require_user),
) -> TenantAccess:
    """Requires coordinator or admin role."""
    if not access.is_coordinator:
        raise HTTPException(status_code=403, detail="Coordinator access required")
    return access


async def require_admin(
    access: TenantAccess = Depends(require_user),
) -> TenantAccess:
    """Requires admin role."""
    if not access.is_admin:
        log.info("auth.admin_denied", tenant_id=str(access.tenant_id), user_id=str(access.user_id))
        raise HTTPException(status_code=403, detail="Admin access required")
    return access
