"""
Tenant Context

Caller identity for one request: who is calling, for which
organization, with which role.
"""
import enum
from dataclasses import dataclass


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


@dataclass(frozen=True)
class TenantContext:
    """
    Per-request caller identity.

    Constructed once at the boundary and passed explicitly into every
    service call. Never persisted.
    """
    user_id: str
    organization_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
