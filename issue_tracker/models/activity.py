"""
Activity Model

Append-only audit record of a single field change on an issue.

issue_id is deliberately not a foreign key: activity rows outlive
the issue they describe, so deleting an issue must not cascade here.
"""
from sqlalchemy import Column, String, Text, DateTime, Index
from issue_tracker.database import Base, utcnow
import uuid


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    issue_id = Column(String(36), nullable=False, index=True)

    # Copy of the owning issue's organization, for scoped queries
    organization_id = Column(String(36), nullable=False, index=True)

    field = Column(String(50), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_activity_issue_org_created', 'issue_id', 'organization_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Activity {self.field} on {self.issue_id}>"
