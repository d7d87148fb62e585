"""
Activity Logger

Records field changes on issues and returns their history.
The log is write-once, read-many.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from issue_tracker.models.activity import Activity
from issue_tracker.repositories.activity import ActivityRepository
from issue_tracker.utils.logging import get_logger

logger = get_logger(__name__)


class ActivityService:

    def __init__(self, db: Session, repository: Optional[ActivityRepository] = None):
        self.db = db
        self.repository = repository or ActivityRepository(db)

    def record(
        self,
        issue_id: str,
        field: str,
        old_value: Optional[str],
        new_value: str,
        organization_id: str,
        commit: bool = True,
    ) -> Activity:
        """
        Append a change record and return it.

        With commit=False the row is only flushed, so the caller can
        commit it together with the change it describes.
        """
        activity = self.repository.append(
            issue_id=issue_id,
            field=field,
            old_value=old_value,
            new_value=new_value,
            organization_id=organization_id,
        )
        if commit:
            self.db.commit()

        logger.info(
            f"Activity recorded: {field} {old_value!r} -> {new_value!r} on issue {issue_id}",
            extra={"organization_id": organization_id, "issue_id": issue_id}
        )
        return activity

    def list_for_issue(self, issue_id: str, organization_id: str) -> List[Activity]:
        """History for an issue within one organization, newest first."""
        return self.repository.list_for_issue(issue_id, organization_id)
