# SQLModel definitions, imported here to ensure metadata is populated for create_all.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .tenant import Tenant  # noqa: F401
from .user import User  # noqa: F401
from .tenant_member import TenantMember  # noqa: F401
from .opportunity import Opportunity  # noqa: F401
from .signup import OpportunitySignup  # noqa: F401
