from datetime import datetime
from typing import ClassVar, Optional
from pydantic import Field

from crm.models.activity import ActivityType, ActivityStatus
from crm.schemas.common_schemas import (
    CamelModel,
    RequestModel,
    UpdateModel,
    UtcDatetime,
    UserRef,
    CompanyRef,
    ContactRef,
    DealRef,
)


class ActivityCreate(RequestModel):
    """Schema for creating an activity"""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    type: ActivityType
    status: Optional[ActivityStatus] = None
    due_date: Optional[UtcDatetime] = None
    assigned_to_id: str = Field(..., min_length=1)
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    deal_id: Optional[str] = None


class ActivityUpdate(UpdateModel):
    """
    Schema for updating an activity (partial).

    completedAt is not writable; it follows status transitions.
    """

    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "type", "status", "assigned_to_id"}
    )

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    type: Optional[ActivityType] = None
    status: Optional[ActivityStatus] = None
    due_date: Optional[UtcDatetime] = None
    assigned_to_id: Optional[str] = Field(None, min_length=1)
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    deal_id: Optional[str] = None


class ActivityResponse(CamelModel):
    id: str
    tenant_id: str
    title: str
    type: ActivityType
    description: Optional[str]
    status: ActivityStatus
    due_date: Optional[datetime]
    completed_at: Optional[datetime]
    assigned_to_id: str
    company_id: Optional[str]
    contact_id: Optional[str]
    deal_id: Optional[str]
    assigned_to: UserRef
    company: Optional[CompanyRef]
    contact: Optional[ContactRef]
    deal: Optional[DealRef]
    created_at: datetime
    updated_at: datetime


class ActivityStats(CamelModel):
    total: int
    planned: int
    in_progress: int
    completed: int
    overdue: int
    by_type: dict[str, int]
