from enum import Enum as PyEnum
from sqlalchemy import String, Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from crm.models.base import Base, IdMixin, TimestampMixin, TenantScopedMixin

if TYPE_CHECKING:
    from crm.models.company import Company
    from crm.models.deal import Deal
    from crm.models.activity import Activity
    from crm.models.note import Note


class ContactStatus(str, PyEnum):
    """Contact relationship status"""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PROSPECT = "PROSPECT"


class Contact(Base, IdMixin, TimestampMixin, TenantScopedMixin):
    """A person at (optionally) a company of the same tenant."""

    __tablename__ = "contacts"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[ContactStatus] = mapped_column(
        Enum(ContactStatus, native_enum=False), nullable=False, default=ContactStatus.ACTIVE
    )
    company_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    company: Mapped[Optional["Company"]] = relationship("Company", back_populates="contacts")
    deals: Mapped[list["Deal"]] = relationship(
        "Deal", back_populates="contact", order_by="Deal.created_at.desc()"
    )
    activities: Mapped[list["Activity"]] = relationship(
        "Activity", back_populates="contact", order_by="Activity.created_at.desc()"
    )
    notes: Mapped[list["Note"]] = relationship(
        "Note", back_populates="contact", order_by="Note.created_at.desc()"
    )

    __table_args__ = (
        Index("ix_contacts_tenant_status", "tenant_id", "status"),
    )
