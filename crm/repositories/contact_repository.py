from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import selectinload, joinedload

from crm.models.contact import Contact, ContactStatus
from crm.models.deal import Deal
from crm.models.activity import Activity
from crm.models.note import Note
from crm.repositories.base import TenantScopedRepository


class ContactRepository(TenantScopedRepository[Contact]):
    """Repository for Contact data access"""

    model = Contact
    count_columns = {
        "deals": Deal.contact_id,
        "activities": Activity.contact_id,
        "notes": Note.contact_id,
    }

    def summary_options(self):
        return [joinedload(Contact.company)]

    def detail_options(self):
        return [
            joinedload(Contact.company),
            selectinload(Contact.deals).joinedload(Deal.owner),
            selectinload(Contact.activities).joinedload(Activity.assigned_to),
            selectinload(Contact.notes).joinedload(Note.author),
        ]

    def get_with_filters(
        self,
        tenant_id: str,
        search: Optional[str] = None,
        status: Optional[ContactStatus] = None,
        company_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Contact], int]:
        """
        Get contacts with filters, ensuring multi-tenant isolation.

        Search is a case-insensitive partial match on first name, last
        name, email or position.
        """
        query = self.scoped(tenant_id)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Contact.first_name.ilike(pattern),
                    Contact.last_name.ilike(pattern),
                    Contact.email.ilike(pattern),
                    Contact.position.ilike(pattern),
                )
            )

        if status is not None:
            query = query.filter(Contact.status == status)

        if company_id is not None:
            query = query.filter(Contact.company_id == company_id)

        return self.paginate(query, page, limit, Contact.created_at.desc())

    def count(
        self,
        tenant_id: str,
        status: Optional[ContactStatus] = None,
        without_company: bool = False,
    ) -> int:
        query = self.scoped(tenant_id)
        if status is not None:
            query = query.filter(Contact.status == status)
        if without_company:
            query = query.filter(Contact.company_id.is_(None))
        return query.count()
