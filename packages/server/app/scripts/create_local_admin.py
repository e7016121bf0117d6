"""
Script to create a local user who administers a tenant, and print a bearer
token for it so the API can be exercised without an identity provider.
"""

import argparse
import asyncio
from datetime import timedelta

from sqlmodel import select

from app.core.auth import create_identity_token
from app.core.database import get_session_context, init_db
from app.models.tenant import Tenant
from app.models.tenant_member import TenantMember
from app.models.user import User
from volunteer_hub_shared.schemas.common import MemberRole, MemberStatus


async def create_admin(email: str, external_id: str, tenant_slug: str, tenant_name: str) -> str:
    await init_db()

    async with get_session_context() as session:
        # 1. Ensure the tenant exists
        result = await session.execute(select(Tenant).where(Tenant.slug == tenant_slug))
        tenant = result.scalar_one_or_none()
        if not tenant:
            tenant = Tenant(slug=tenant_slug, name=tenant_name)
            session.add(tenant)
            print(f"Created tenant: {tenant_slug}")

        # 2. Ensure the user exists
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user:
            user = User(external_id=external_id, email=email, name=email.split("@")[0])
            session.add(user)
            print(f"Created user: {email}")
        else:
            print(f"User {email} already exists.")

        await session.flush()

        # 3. Ensure an active admin membership
        result = await session.execute(
            select(TenantMember).where(
                TenantMember.tenant_id == tenant.id, TenantMember.user_id == user.id
            )
        )
        membership = result.scalar_one_or_none()
        if not membership:
            membership = TenantMember(tenant_id=tenant.id, user_id=user.id)
            session.add(membership)
        membership.role = MemberRole.ADMIN.value
        membership.status = MemberStatus.ACTIVE.value
        print(f"{email} is an admin of {tenant_slug}")

        subject = user.external_id

    return create_identity_token(subject, email=email, expires_delta=timedelta(days=7))


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a local tenant admin and print a token.")
    parser.add_argument("email", help="Admin email")
    parser.add_argument("--external-id", default=None, help="Identity subject (default: local|<email>)")
    parser.add_argument("--tenant", default="demo-org", help="Tenant slug")
    parser.add_argument("--tenant-name", default="Demo Organization", help="Name for a new tenant")
    args = parser.parse_args()

    token = asyncio.run(
        create_admin(
            args.email,
            args.external_id or f"local|{args.email}",
            args.tenant,
            args.tenant_name,
        )
    )
    print()
    print("Bearer token (7 days):")
    print(token)


if __name__ == "__main__":
    main()
