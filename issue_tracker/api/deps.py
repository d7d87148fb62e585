"""
API Dependencies

Reusable FastAPI dependencies. Handlers receive the tenant context and
services from here and pass the context explicitly to every call.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from issue_tracker.database import get_db
from issue_tracker.core.tenant import TenantContext
from issue_tracker.middleware.tenant import extract_tenant_context
from issue_tracker.services.activity_service import ActivityService
from issue_tracker.services.issue_service import IssueService
import logging

logger = logging.getLogger(__name__)


def get_tenant_context(request: Request) -> TenantContext:
    """
    Get the tenant context set by TenantMiddleware.

    Falls back to validating the headers directly so routes stay
    protected even if the middleware is not installed.
    """
    ctx = getattr(request.state, "tenant_context", None)
    if ctx is None:
        logger.warning("No tenant context in request state - validating headers in dependency")
        ctx = extract_tenant_context(request.headers)
    return ctx


def get_activity_service(db: Session = Depends(get_db)) -> ActivityService:
    return ActivityService(db)


def get_issue_service(
    db: Session = Depends(get_db),
    activity: ActivityService = Depends(get_activity_service),
) -> IssueService:
    return IssueService(db, activity=activity)
