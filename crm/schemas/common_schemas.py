import math
from datetime import datetime, UTC
from typing import Annotated, ClassVar, Generic, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from crm.models.contact import ContactStatus
from crm.models.deal import DealStage, DealStatus
from crm.models.activity import ActivityType, ActivityStatus

T = TypeVar("T")

# Related rows embedded in detail responses
RECENT_LIMIT = 10


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _most_recent(items):
    # Relationships are already ordered newest first
    return list(items)[:RECENT_LIMIT]


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """
    Base schema for the JSON API.

    Fields are snake_case in Python and camelCase on the wire; both
    spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(CamelModel):
    """Request body schema; unknown fields (e.g. tenantId) are rejected"""

    model_config = ConfigDict(extra="forbid")


class UpdateModel(RequestModel):
    """
    Partial update schema.

    Only fields present in the request are applied. Fields listed in
    `required_fields` map to NOT NULL columns and may be omitted but not
    set to null.
    """

    required_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in self.model_fields_set & self.required_fields:
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PaginationMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        return cls(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit))


class PageResponse(CamelModel, Generic[T]):
    """List envelope: {data: [...], meta: {total, page, limit, totalPages}}"""

    data: list[T]
    meta: PaginationMeta


class MessageResponse(CamelModel):
    message: str


# Reference projections of related rows


class UserRef(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str


class CompanyRef(CamelModel):
    id: str
    name: str


class ContactRef(CamelModel):
    id: str
    first_name: str
    last_name: str


class DealRef(CamelModel):
    id: str
    title: str


# Nested rows embedded in company/contact/deal detail responses


class ContactSummary(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    position: Optional[str]
    status: ContactStatus
    created_at: datetime


class DealSummary(CamelModel):
    id: str
    title: str
    value: float
    currency: str
    stage: DealStage
    status: DealStatus
    probability: int
    close_date: Optional[datetime]
    owner: Optional[UserRef] = None
    created_at: datetime


class ActivitySummary(CamelModel):
    id: str
    title: str
    type: ActivityType
    status: ActivityStatus
    due_date: Optional[datetime]
    completed_at: Optional[datetime]
    assigned_to: UserRef
    created_at: datetime


class NoteSummary(CamelModel):
    id: str
    content: str
    author: UserRef
    created_at: datetime


RecentActivities = Annotated[list[ActivitySummary], BeforeValidator(_most_recent)]
RecentNotes = Annotated[list[NoteSummary], BeforeValidator(_most_recent)]
