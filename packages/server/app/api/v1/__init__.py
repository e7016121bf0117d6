"""
API v1 Router

All tenant-scoped endpoints are prefixed with /tenants/{tenantSlug}.
"""

from fastapi import APIRouter
from . import me, members, opportunities, pages, signups, users
from .tenants import router_global as tenants_global_router
from .tenants import router_scoped as tenants_scoped_router

router = APIRouter()

# Tenant routes (non-tenant-scoped: list, create, by id)
router.include_router(tenants_global_router)

# Tenant routes (tenant-scoped: get, update, delete, join)
router.include_router(tenants_scoped_router, prefix="/tenants/{tenantSlug}", tags=["Tenants"])

# Include resource routers
router.include_router(
    opportunities.router, prefix="/tenants/{tenantSlug}/opportunities", tags=["Opportunities"]
)
router.include_router(signups.router, prefix="/tenants/{tenantSlug}/signups", tags=["Signups"])
router.include_router(members.router, prefix="/tenants/{tenantSlug}/members", tags=["Members"])
router.include_router(users.router, prefix="/users")
router.include_router(me.router, prefix="/me")
router.include_router(pages.router, prefix="/pages", tags=["Pages"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/tenants",
            "/tenants/{tenantSlug}",
            "/tenants/{tenantSlug}/opportunities",
            "/tenants/{tenantSlug}/signups",
            "/tenants/{tenantSlug}/members",
            "/users",
            "/me",
            "/pages",
        ],
    }
