"""
Activity Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ActivityResponse(BaseModel):
    """Single field-change record."""
    id: str
    issue_id: str = Field(serialization_alias="issueId")
    field: str
    old_value: Optional[str] = Field(serialization_alias="oldValue")
    new_value: str = Field(serialization_alias="newValue")
    organization_id: str = Field(serialization_alias="organizationId")
    created_at: datetime = Field(serialization_alias="createdAt")

    class Config:
        from_attributes = True
