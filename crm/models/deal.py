from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import String, Text, Integer, Numeric, DateTime, Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from crm.models.base import Base, IdMixin, TimestampMixin, TenantScopedMixin

if TYPE_CHECKING:
    from crm.models.user import User
    from crm.models.company import Company
    from crm.models.contact import Contact
    from crm.models.activity import Activity
    from crm.models.note import Note


class DealStage(str, PyEnum):
    """Sales funnel stages, in funnel order"""

    PROSPECTING = "PROSPECTING"
    QUALIFICATION = "QUALIFICATION"
    PROPOSAL = "PROPOSAL"
    NEGOTIATION = "NEGOTIATION"
    CLOSED_WON = "CLOSED_WON"
    CLOSED_LOST = "CLOSED_LOST"


class DealStatus(str, PyEnum):
    """Deal outcome"""

    OPEN = "OPEN"
    WON = "WON"
    LOST = "LOST"


class Deal(Base, IdMixin, TimestampMixin, TenantScopedMixin):
    """
    A sales opportunity owned by a user of the tenant.

    Value is a non-negative decimal amount in `currency`; probability is a
    percentage (0-100).
    """

    __tablename__ = "deals"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    value: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    stage: Mapped[DealStage] = mapped_column(
        Enum(DealStage, native_enum=False), nullable=False, default=DealStage.PROSPECTING
    )
    status: Mapped[DealStatus] = mapped_column(
        Enum(DealStatus, native_enum=False), nullable=False, default=DealStatus.OPEN
    )
    probability: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    close_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True
    )
    contact_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    owner: Mapped["User"] = relationship("User")
    company: Mapped[Optional["Company"]] = relationship("Company", back_populates="deals")
    contact: Mapped[Optional["Contact"]] = relationship("Contact", back_populates="deals")
    activities: Mapped[list["Activity"]] = relationship(
        "Activity", back_populates="deal", order_by="Activity.created_at.desc()"
    )
    notes: Mapped[list["Note"]] = relationship(
        "Note", back_populates="deal", order_by="Note.created_at.desc()"
    )

    # Composite indexes for common queries
    __table_args__ = (
        Index("ix_deals_tenant_status_stage", "tenant_id", "status", "stage"),
    )
