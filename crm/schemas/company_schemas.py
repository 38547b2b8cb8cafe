from datetime import datetime
from typing import ClassVar, Optional
from pydantic import EmailStr, Field

from crm.models.company import CompanySize, CompanyStatus
from crm.schemas.common_schemas import (
    CamelModel,
    RequestModel,
    UpdateModel,
    ContactSummary,
    DealSummary,
    RecentActivities,
    RecentNotes,
)


class CompanyCreate(RequestModel):
    """Schema for creating a company"""

    name: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    size: Optional[CompanySize] = None
    status: Optional[CompanyStatus] = None


class CompanyUpdate(UpdateModel):
    """Schema for updating a company (partial)"""

    required_fields: ClassVar[frozenset[str]] = frozenset({"name", "status"})

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    size: Optional[CompanySize] = None
    status: Optional[CompanyStatus] = None


class CompanyCounts(CamelModel):
    contacts: int
    deals: int
    activities: int


class CompanyResponse(CamelModel):
    """Company with related-row counts (list, create, update)"""

    id: str
    tenant_id: str
    name: str
    industry: Optional[str]
    website: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]
    description: Optional[str]
    size: Optional[CompanySize]
    status: CompanyStatus
    counts: CompanyCounts
    created_at: datetime
    updated_at: datetime


class CompanyDetailResponse(CompanyResponse):
    """Company with its contacts, deals and most recent activities and notes"""

    contacts: list[ContactSummary]
    deals: list[DealSummary]
    activities: RecentActivities
    notes: RecentNotes


class CompanyStats(CamelModel):
    total: int
    active: int
    prospects: int
    by_size: dict[str, int]
