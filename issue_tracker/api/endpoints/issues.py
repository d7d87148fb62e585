"""
Issue Endpoints

CRUD operations for issues within an organization, plus the change
history of a single issue.

RBAC:
- List/view/create issues: any role
- Update title/description: any role
- Update status/assignee: ADMIN
- Delete issue: ADMIN
"""
from fastapi import APIRouter, Depends, status
from typing import List

from issue_tracker.api.deps import get_tenant_context, get_issue_service, get_activity_service
from issue_tracker.core.tenant import TenantContext
from issue_tracker.schemas.activity import ActivityResponse
from issue_tracker.schemas.issue import IssueCreate, IssueResponse, IssueUpdate
from issue_tracker.services.activity_service import ActivityService
from issue_tracker.services.issue_service import IssueService

router = APIRouter(prefix="/issues", tags=["issues"])


@router.post("", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    issue_data: IssueCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    service: IssueService = Depends(get_issue_service)
):
    """Create an issue in the caller's organization."""
    return service.create(issue_data, ctx)


@router.get("", response_model=List[IssueResponse])
async def list_issues(
    ctx: TenantContext = Depends(get_tenant_context),
    service: IssueService = Depends(get_issue_service)
):
    """All issues of the caller's organization, newest first."""
    return service.list(ctx)


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(
    issue_id: str,
    ctx: TenantContext = Depends(get_tenant_context),
    service: IssueService = Depends(get_issue_service)
):
    return service.get_one(issue_id, ctx)


@router.get("/{issue_id}/activity", response_model=List[ActivityResponse])
async def get_issue_activity(
    issue_id: str,
    ctx: TenantContext = Depends(get_tenant_context),
    service: IssueService = Depends(get_issue_service),
    activity: ActivityService = Depends(get_activity_service)
):
    """
    Change history of an issue, newest first.

    Same ownership rules as fetching the issue itself.
    """
    issue = service.get_one(issue_id, ctx)
    return activity.list_for_issue(issue.id, ctx.organization_id)


@router.patch("/{issue_id}", response_model=IssueResponse)
async def update_issue(
    issue_id: str,
    issue_data: IssueUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    service: IssueService = Depends(get_issue_service)
):
    """
    Partially update an issue.

    Any role may edit title/description. Including status or
    assigneeId in the body requires ADMIN.
    """
    return service.update(issue_id, issue_data, ctx)


@router.delete("/{issue_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_issue(
    issue_id: str,
    ctx: TenantContext = Depends(get_tenant_context),
    service: IssueService = Depends(get_issue_service)
):
    """Permanently delete an issue. ADMIN only; history is kept."""
    service.delete(issue_id, ctx)
    return None
