from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Text, DateTime, Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from crm.models.base import Base, IdMixin, TimestampMixin, TenantScopedMixin

if TYPE_CHECKING:
    from crm.models.user import User
    from crm.models.company import Company
    from crm.models.contact import Contact
    from crm.models.deal import Deal


class ActivityType(str, PyEnum):
    CALL = "CALL"
    EMAIL = "EMAIL"
    MEETING = "MEETING"
    TASK = "TASK"
    NOTE = "NOTE"


class ActivityStatus(str, PyEnum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Statuses of work that is still pending (used by overdue/upcoming queries)
PENDING_STATUSES = (ActivityStatus.PLANNED, ActivityStatus.IN_PROGRESS)


class Activity(Base, IdMixin, TimestampMixin, TenantScopedMixin):
    """
    A call, e-mail, meeting or task assigned to a user.

    completed_at is set exactly when status is COMPLETED.
    """

    __tablename__ = "activities"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[ActivityType] = mapped_column(Enum(ActivityType, native_enum=False), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ActivityStatus] = mapped_column(
        Enum(ActivityStatus, native_enum=False), nullable=False, default=ActivityStatus.PLANNED
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    assigned_to_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True
    )
    contact_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    deal_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("deals.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    assigned_to: Mapped["User"] = relationship("User")
    company: Mapped[Optional["Company"]] = relationship("Company", back_populates="activities")
    contact: Mapped[Optional["Contact"]] = relationship("Contact", back_populates="activities")
    deal: Mapped[Optional["Deal"]] = relationship("Deal", back_populates="activities")

    __table_args__ = (
        Index("ix_activities_tenant_status_due", "tenant_id", "status", "due_date"),
    )
