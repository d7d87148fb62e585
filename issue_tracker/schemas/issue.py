"""
Issue Schemas

Request/response models for issue operations.
JSON uses camelCase; input also accepts snake_case.
"""
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from issue_tracker.models.issue import IssueStatus


def _blank_to_none(value):
    # An empty assignee means unassigned
    if value == "":
        return None
    return value


class IssueCreate(BaseModel):
    """
    Schema for creating an issue.

    There is no organization field: the organization always comes
    from the tenant context. Unknown body fields are ignored.
    """
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    assignee_id: Optional[str] = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("assigneeId", "assignee_id")
    )

    @field_validator("assignee_id", mode="before")
    @classmethod
    def normalize_assignee(cls, value):
        return _blank_to_none(value)


class IssueUpdate(BaseModel):
    """
    Schema for updating an issue. All fields optional.

    Absent fields mean "no change". An explicit null assigneeId clears
    the assignee; use model_dump(exclude_unset=True) to tell them apart.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[IssueStatus] = None
    assignee_id: Optional[str] = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("assigneeId", "assignee_id")
    )

    @field_validator("assignee_id", mode="before")
    @classmethod
    def normalize_assignee(cls, value):
        return _blank_to_none(value)

    @field_validator("title", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class IssueResponse(BaseModel):
    """Issue response schema."""
    id: str
    title: str
    description: Optional[str]
    status: IssueStatus
    assignee_id: Optional[str] = Field(serialization_alias="assigneeId")
    organization_id: str = Field(serialization_alias="organizationId")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    class Config:
        from_attributes = True
