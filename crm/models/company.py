from enum import Enum as PyEnum
from sqlalchemy import String, Text, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from crm.models.base import Base, IdMixin, TimestampMixin, TenantScopedMixin

if TYPE_CHECKING:
    from crm.models.contact import Contact
    from crm.models.deal import Deal
    from crm.models.activity import Activity
    from crm.models.note import Note


class CompanySize(str, PyEnum):
    """Company size enumeration"""

    STARTUP = "STARTUP"
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    ENTERPRISE = "ENTERPRISE"


class CompanyStatus(str, PyEnum):
    """Company relationship status"""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PROSPECT = "PROSPECT"


class Company(Base, IdMixin, TimestampMixin, TenantScopedMixin):
    """
    An organization tracked by a tenant.

    Contacts, deals, activities and notes may optionally link to a company
    of the same tenant. Deleting a company detaches them (link set to NULL).
    """

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    size: Mapped[CompanySize | None] = mapped_column(
        Enum(CompanySize, native_enum=False), nullable=True
    )
    status: Mapped[CompanyStatus] = mapped_column(
        Enum(CompanyStatus, native_enum=False), nullable=False, default=CompanyStatus.ACTIVE
    )

    # Relationships (newest first)
    contacts: Mapped[list["Contact"]] = relationship(
        "Contact", back_populates="company", order_by="Contact.created_at.desc()"
    )
    deals: Mapped[list["Deal"]] = relationship(
        "Deal", back_populates="company", order_by="Deal.created_at.desc()"
    )
    activities: Mapped[list["Activity"]] = relationship(
        "Activity", back_populates="company", order_by="Activity.created_at.desc()"
    )
    notes: Mapped[list["Note"]] = relationship(
        "Note", back_populates="company", order_by="Note.created_at.desc()"
    )

    __table_args__ = (
        Index("ix_companies_tenant_status", "tenant_id", "status"),
    )
