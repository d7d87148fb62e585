"""
Activity Repository

Append-only: there is no update or delete.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from issue_tracker.models.activity import Activity


class ActivityRepository:
    """SQLAlchemy-backed activity log."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        issue_id: str,
        field: str,
        old_value: Optional[str],
        new_value: str,
        organization_id: str,
    ) -> Activity:
        activity = Activity(
            issue_id=issue_id,
            field=field,
            old_value=old_value,
            new_value=new_value,
            organization_id=organization_id,
        )
        self.db.add(activity)
        self.db.flush()
        return activity

    def list_for_issue(self, issue_id: str, organization_id: str) -> List[Activity]:
        # organization filter applies even when issue_id is known
        return (
            self.db.query(Activity)
            .filter(
                Activity.issue_id == issue_id,
                Activity.organization_id == organization_id,
            )
            .order_by(Activity.created_at.desc())
            .all()
        )
