"""
Issue Repository

Data access for issues. Listing is scoped by organization;
get_by_id is not, so callers can tell "missing" from "elsewhere".

Repositories stage changes on the session. Services own the commit.
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from issue_tracker.models.issue import Issue


class IssueRepository:
    """SQLAlchemy-backed issue store."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        organization_id: str,
        title: str,
        description: Optional[str] = None,
        assignee_id: Optional[str] = None,
    ) -> Issue:
        issue = Issue(
            organization_id=organization_id,
            title=title,
            description=description,
            assignee_id=assignee_id,
        )
        self.db.add(issue)
        self.db.flush()
        return issue

    def list_for_organization(self, organization_id: str) -> List[Issue]:
        return (
            self.db.query(Issue)
            .filter(Issue.organization_id == organization_id)
            .order_by(Issue.created_at.desc())
            .all()
        )

    def get_by_id(self, issue_id: str) -> Optional[Issue]:
        return self.db.query(Issue).filter(Issue.id == issue_id).first()

    def update(self, issue: Issue, changes: Dict[str, Any]) -> Issue:
        for field, value in changes.items():
            # organization_id is immutable after creation
            if field == "organization_id":
                continue
            setattr(issue, field, value)
        return issue

    def delete(self, issue: Issue) -> None:
        self.db.delete(issue)
