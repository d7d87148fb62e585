"""
Database Models

Every model carries organization_id for multi-tenant isolation.
"""
from issue_tracker.models.issue import Issue, IssueStatus
from issue_tracker.models.activity import Activity

__all__ = ["Issue", "IssueStatus", "Activity"]
