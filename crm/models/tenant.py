"""Tenant model for multi-tenant isolation."""

from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from crm.models.base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from crm.models.user import User


class Tenant(Base, IdMixin, TimestampMixin):
    """
    Multi-tenant isolation boundary.

    A tenant is one customer organization. Every company, contact, deal,
    activity, note and user row belongs to exactly one tenant, and no row
    is ever visible to or reassigned to a different tenant.

    Tenants are deactivated (is_active=False), never deleted in the normal
    flow. Requests addressed to an inactive tenant are rejected as if the
    tenant did not exist.
    """

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(String(63), unique=True, nullable=False, index=True)
    plan: Mapped[str] = mapped_column(String(50), nullable=False, default="free")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    users: Mapped[list["User"]] = relationship(
        "User",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, subdomain='{self.subdomain}')>"
