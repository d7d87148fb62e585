"""
Permission System

Two roles, no hierarchy table:
- ADMIN: may change status/assignee and delete issues
- MEMBER: may create issues and edit title/description

Checks take the request's TenantContext explicitly.
"""
from typing import Iterable

from issue_tracker.core.exceptions import PermissionDenied
from issue_tracker.core.tenant import TenantContext

# Fields only an ADMIN may include in an update
ADMIN_ONLY_FIELDS = ("status", "assignee_id")


def require_admin(ctx: TenantContext, detail: str = "Admin privileges required") -> None:
    """Raise PermissionDenied unless the caller is an ADMIN."""
    if not ctx.is_admin:
        raise PermissionDenied(detail=detail)


def can_update_fields(ctx: TenantContext, fields: Iterable[str]) -> bool:
    """
    Check whether the caller may submit a patch containing `fields`.

    Presence of a restricted field is enough to deny a MEMBER, even
    when its value equals the stored one.
    """
    if ctx.is_admin:
        return True
    return not any(field in ADMIN_ONLY_FIELDS for field in fields)
