"""
Issue Model

Issues are the tenant-scoped resource of this service. Each issue
belongs to exactly one organization for its whole lifetime.

IMPORTANT: organization_id is set once at creation from the caller's
tenant context and is never part of an update.
"""
from sqlalchemy import Column, String, Text, DateTime, Index, Enum as SQLEnum
from issue_tracker.database import Base, utcnow
import uuid
import enum


class IssueStatus(str, enum.Enum):
    """
    Issue status.

    Flat enumeration: any status may move to any other.
    """
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


class Issue(Base):
    __tablename__ = "issues"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Tenant key. No organizations table here; the id comes from the
    # request headers and is trusted as given.
    organization_id = Column(String(36), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(IssueStatus),
        default=IssueStatus.OPEN,
        nullable=False,
        index=True
    )

    # Nullable: unassigned issues
    assignee_id = Column(String(255), nullable=True, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        # list() query: issues of an organization, newest first
        Index('idx_issue_org_created', 'organization_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Issue {self.id} (organization={self.organization_id})>"
