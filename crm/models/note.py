from sqlalchemy import String, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from crm.models.base import Base, IdMixin, TimestampMixin, TenantScopedMixin

if TYPE_CHECKING:
    from crm.models.user import User
    from crm.models.company import Company
    from crm.models.contact import Contact
    from crm.models.deal import Deal


class Note(Base, IdMixin, TimestampMixin, TenantScopedMixin):
    """
    Free-text note written by a user.

    Only the author may change or delete it.
    """

    __tablename__ = "notes"

    content: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[str] = mapped_column(
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
    author: Mapped["User"] = relationship("User")
    company: Mapped[Optional["Company"]] = relationship("Company", back_populates="notes")
    contact: Mapped[Optional["Contact"]] = relationship("Contact", back_populates="notes")
    deal: Mapped[Optional["Deal"]] = relationship("Deal", back_populates="notes")
