"""
Tenant Middleware

Builds the tenant context from request headers and makes it available
for the rest of the request. This is the first line of defense for
tenant isolation: requests without a valid context never reach a route.

Required headers:
- X-User-Id
- X-Organization-Id
- X-User-Role (ADMIN or MEMBER)
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from typing import Mapping
import logging

from issue_tracker.core.exceptions import InvalidTenantContextError
from issue_tracker.core.tenant import TenantContext, UserRole
from issue_tracker.utils.logging import log_security_event

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
ORGANIZATION_ID_HEADER = "X-Organization-Id"
ROLE_HEADER = "X-User-Role"


def extract_tenant_context(headers: Mapping[str, str]) -> TenantContext:
    """
    Validate tenant headers and build a TenantContext.

    Raises InvalidTenantContextError when a header is missing or empty,
    or when the role is not ADMIN/MEMBER.
    """
    user_id = headers.get(USER_ID_HEADER)
    organization_id = headers.get(ORGANIZATION_ID_HEADER)
    role = headers.get(ROLE_HEADER)

    if not user_id or not organization_id or not role:
        raise InvalidTenantContextError(
            detail="Missing required headers: x-user-id, x-organization-id, x-user-role"
        )

    try:
        parsed_role = UserRole(role)
    except ValueError:
        raise InvalidTenantContextError(detail="Invalid role. Must be ADMIN or MEMBER")

    return TenantContext(user_id=user_id, organization_id=organization_id, role=parsed_role)


class TenantMiddleware(BaseHTTPMiddleware):
    """
    Middleware to extract and validate the tenant context.

    Runs on every request except the excluded paths and stores the
    result on request.state.tenant_context.
    """

    def __init__(self, app):
        super().__init__(app)
        self.excluded_paths = [
            "/docs",
            "/redoc",
            "/openapi.json",
            "/health",
        ]

    async def dispatch(self, request: Request, call_next):
        """Process each request and inject tenant context."""

        path = request.url.path
        if path == "/" or any(path.startswith(p) for p in self.excluded_paths):
            return await call_next(request)

        try:
            ctx = extract_tenant_context(request.headers)
        except InvalidTenantContextError as exc:
            # Exceptions raised in middleware bypass the app's handlers
            log_security_event(
                "invalid_tenant_context",
                {"path": path, "reason": exc.detail},
                logger
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail, "type": "invalid_tenant_context"}
            )

        request.state.tenant_context = ctx
        request.state.organization_id = ctx.organization_id

        logger.debug(f"Request for organization {ctx.organization_id} by {ctx.user_id} ({ctx.role.value})")

        return await call_next(request)
