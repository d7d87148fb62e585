"""
Issue Manager

Lifecycle operations for issues. Every method takes the caller's
TenantContext explicitly and re-validates ownership against the
stored row before doing anything.

RBAC:
- Create / list / view: any role
- Edit title or description: any role
- Change status or assignee: ADMIN only
- Delete: ADMIN only
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from issue_tracker.core.exceptions import IssueNotFoundError, TenantIsolationError, PermissionDenied
from issue_tracker.core.permissions import can_update_fields, require_admin
from issue_tracker.core.tenant import TenantContext
from issue_tracker.models.issue import Issue
from issue_tracker.repositories.issue import IssueRepository
from issue_tracker.schemas.issue import IssueCreate, IssueUpdate
from issue_tracker.services.activity_service import ActivityService
from issue_tracker.utils.logging import get_logger

logger = get_logger(__name__)

# Logged in place of a null assignee
UNASSIGNED = "unassigned"

STATUS_FIELD = "status"
ASSIGNEE_FIELD = "assigneeId"


class IssueService:

    def __init__(
        self,
        db: Session,
        issues: Optional[IssueRepository] = None,
        activity: Optional[ActivityService] = None,
    ):
        self.db = db
        self.issues = issues or IssueRepository(db)
        self.activity = activity or ActivityService(db)

    def create(self, data: IssueCreate, ctx: TenantContext) -> Issue:
        """Create an issue in the caller's organization."""
        issue = self.issues.create(
            organization_id=ctx.organization_id,
            title=data.title,
            description=data.description,
            assignee_id=data.assignee_id,
        )
        self.db.commit()
        self.db.refresh(issue)

        logger.info(
            f"Issue created: {issue.id} by {ctx.user_id}",
            extra={"organization_id": ctx.organization_id, "user_id": ctx.user_id}
        )
        return issue

    def list(self, ctx: TenantContext) -> List[Issue]:
        issues = self.issues.list_for_organization(ctx.organization_id)
        logger.debug(f"Listed {len(issues)} issues for organization {ctx.organization_id}")
        return issues

    def get_one(self, issue_id: str, ctx: TenantContext) -> Issue:
        """
        Fetch an issue owned by the caller's organization.

        Raises IssueNotFoundError if the id does not exist anywhere and
        TenantIsolationError if it exists in another organization.
        """
        issue = self.issues.get_by_id(issue_id)

        if not issue:
            raise IssueNotFoundError(issue_id)

        if issue.organization_id != ctx.organization_id:
            raise TenantIsolationError()

        return issue

    def update(self, issue_id: str, patch: IssueUpdate, ctx: TenantContext) -> Issue:
        """
        Apply a partial update.

        Status and assignee changes are logged before the issue row is
        written. Both land in the same commit.
        """
        issue = self.get_one(issue_id, ctx)

        changes = patch.model_dump(exclude_unset=True)

        if not can_update_fields(ctx, changes):
            raise PermissionDenied("Only ADMIN users can update status or assignee")

        if "status" in changes and changes["status"] != issue.status:
            self.activity.record(
                issue_id=issue.id,
                field=STATUS_FIELD,
                old_value=issue.status.value,
                new_value=changes["status"].value,
                organization_id=ctx.organization_id,
                commit=False,
            )

        if "assignee_id" in changes and changes["assignee_id"] != issue.assignee_id:
            self.activity.record(
                issue_id=issue.id,
                field=ASSIGNEE_FIELD,
                old_value=issue.assignee_id or UNASSIGNED,
                new_value=changes["assignee_id"] or UNASSIGNED,
                organization_id=ctx.organization_id,
                commit=False,
            )

        self.issues.update(issue, changes)

        try:
            self.db.commit()
        except StaleDataError:
            # Row deleted between the ownership check and the write.
            # The rollback discards the activity rows as well.
            self.db.rollback()
            logger.warning(
                f"Issue {issue_id} was deleted during update",
                extra={"organization_id": ctx.organization_id, "issue_id": issue_id}
            )
            raise IssueNotFoundError(issue_id)

        self.db.refresh(issue)

        logger.info(
            f"Issue updated: {issue.id} by {ctx.user_id} ({', '.join(sorted(changes)) or 'no fields'})",
            extra={"organization_id": ctx.organization_id, "user_id": ctx.user_id}
        )
        return issue

    def delete(self, issue_id: str, ctx: TenantContext) -> None:
        """
        Permanently delete an issue. ADMIN only.

        Activity rows for the issue are retained.
        """
        issue = self.get_one(issue_id, ctx)

        require_admin(ctx, "Only ADMIN users can delete issues")

        self.issues.delete(issue)
        self.db.commit()

        logger.info(
            f"Issue deleted: {issue_id} by {ctx.user_id}",
            extra={"organization_id": ctx.organization_id, "user_id": ctx.user_id}
        )
