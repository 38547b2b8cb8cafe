from datetime import datetime
from typing import ClassVar, Optional
from pydantic import EmailStr, Field

from crm.models.contact import ContactStatus
from crm.schemas.common_schemas import (
    CamelModel,
    RequestModel,
    UpdateModel,
    CompanyRef,
    DealSummary,
    RecentActivities,
    RecentNotes,
)


class ContactCreate(RequestModel):
    """Schema for creating a contact"""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    position: Optional[str] = Field(None, max_length=100)
    status: Optional[ContactStatus] = None
    company_id: Optional[str] = None


class ContactUpdate(UpdateModel):
    """Schema for updating a contact (partial); companyId null detaches"""

    required_fields: ClassVar[frozenset[str]] = frozenset({"first_name", "last_name", "status"})

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    position: Optional[str] = Field(None, max_length=100)
    status: Optional[ContactStatus] = None
    company_id: Optional[str] = None


class ContactCounts(CamelModel):
    deals: int
    activities: int
    notes: int


class ContactResponse(CamelModel):
    """Contact with company reference and related-row counts"""

    id: str
    tenant_id: str
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    position: Optional[str]
    status: ContactStatus
    company_id: Optional[str]
    company: Optional[CompanyRef]
    counts: ContactCounts
    created_at: datetime
    updated_at: datetime


class ContactDetailResponse(ContactResponse):
    deals: list[DealSummary]
    activities: RecentActivities
    notes: RecentNotes


class ContactStats(CamelModel):
    total: int
    active: int
    prospects: int
    without_company: int
