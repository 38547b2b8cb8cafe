from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional
from pydantic import Field

from crm.models.deal import DealStage, DealStatus
from crm.schemas.common_schemas import (
    CamelModel,
    RequestModel,
    UpdateModel,
    UtcDatetime,
    CompanyRef,
    ContactRef,
    UserRef,
    RecentActivities,
    RecentNotes,
)


class DealCreate(RequestModel):
    """Schema for creating a deal; ownerId must be a user of the same tenant"""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    value: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    stage: Optional[DealStage] = None
    status: Optional[DealStatus] = None
    probability: Optional[int] = Field(None, ge=0, le=100)
    close_date: Optional[UtcDatetime] = None
    owner_id: str = Field(..., min_length=1)
    company_id: Optional[str] = None
    contact_id: Optional[str] = None


class DealUpdate(UpdateModel):
    """Schema for updating a deal (partial)"""

    required_fields: ClassVar[frozenset[str]] = frozenset(
        {"title", "value", "currency", "stage", "status", "probability", "owner_id"}
    )

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    value: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    stage: Optional[DealStage] = None
    status: Optional[DealStatus] = None
    probability: Optional[int] = Field(None, ge=0, le=100)
    close_date: Optional[UtcDatetime] = None
    owner_id: Optional[str] = Field(None, min_length=1)
    company_id: Optional[str] = None
    contact_id: Optional[str] = None


class DealCounts(CamelModel):
    activities: int
    notes: int


class DealResponse(CamelModel):
    """Deal with company, contact and owner references"""

    id: str
    tenant_id: str
    title: str
    description: Optional[str]
    value: float
    currency: str
    stage: DealStage
    status: DealStatus
    probability: int
    close_date: Optional[datetime]
    owner_id: str
    company_id: Optional[str]
    contact_id: Optional[str]
    owner: UserRef
    company: Optional[CompanyRef]
    contact: Optional[ContactRef]
    counts: DealCounts
    created_at: datetime
    updated_at: datetime


class DealDetailResponse(DealResponse):
    activities: RecentActivities
    notes: RecentNotes


class StageTotals(CamelModel):
    count: int
    value: float


class DealStats(CamelModel):
    total: int
    open: int
    won: int
    lost: int
    by_stage: dict[str, StageTotals]
    total_value: float
    avg_value: float


class PipelineStage(CamelModel):
    """Open deals in one funnel stage"""

    stage: DealStage
    count: int
    value: float
