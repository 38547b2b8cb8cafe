from datetime import datetime
from typing import ClassVar, Optional
from pydantic import Field

from crm.schemas.common_schemas import (
    CamelModel,
    RequestModel,
    UpdateModel,
    UserRef,
    CompanyRef,
    ContactRef,
    DealRef,
)


class NoteCreate(RequestModel):
    """Schema for creating a note; the author is the caller"""

    content: str = Field(..., min_length=1, max_length=20000)
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    deal_id: Optional[str] = None


class NoteUpdate(UpdateModel):
    required_fields: ClassVar[frozenset[str]] = frozenset({"content"})

    content: Optional[str] = Field(None, min_length=1, max_length=20000)
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    deal_id: Optional[str] = None


class NoteResponse(CamelModel):
    id: str
    tenant_id: str
    content: str
    author_id: str
    company_id: Optional[str]
    contact_id: Optional[str]
    deal_id: Optional[str]
    author: UserRef
    company: Optional[CompanyRef]
    contact: Optional[ContactRef]
    deal: Optional[DealRef]
    created_at: datetime
    updated_at: datetime


class NoteEntityCounts(CamelModel):
    companies: int
    contacts: int
    deals: int
    unattached: int


class NoteStats(CamelModel):
    total: int
    recent_count: int
    by_entity: NoteEntityCounts
