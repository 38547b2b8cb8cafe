import logging
from typing import Optional
from sqlalchemy.orm import Session

from crm.models.contact import Contact, ContactStatus
from crm.models.tenant_context import TenantContext
from crm.repositories.contact_repository import ContactRepository
from crm.schemas.contact_schemas import ContactCreate, ContactUpdate
from crm.services.reference_checker import ReferenceChecker
from crm.core.exceptions import NotFoundException

logger = logging.getLogger(__name__)


class ContactService:
    """Service layer for contact business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContactRepository(db)
        self.references = ReferenceChecker(db)

    def _get_or_404(self, contact_id: str, context: TenantContext) -> Contact:
        contact = self.repo.get_by_id_and_tenant(contact_id, context.tenant_id)
        if not contact:
            raise NotFoundException("Contact not found")
        return contact

    def create_contact(self, data: ContactCreate, context: TenantContext) -> Contact:
        """
        Create a contact in the caller's tenant.

        Raises:
            NotFoundException: If companyId is not a company of the tenant
        """
        self.references.check_links(context.tenant_id, company_id=data.company_id)

        contact = Contact(tenant_id=context.tenant_id, **data.model_dump(exclude_none=True))
        contact = self.repo.create(contact)
        return self.repo.get_summary(contact.id, context.tenant_id)

    def get_contacts(
        self,
        context: TenantContext,
        search: Optional[str] = None,
        status: Optional[ContactStatus] = None,
        company_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Contact], int]:
        return self.repo.get_with_filters(
            tenant_id=context.tenant_id,
            search=search,
            status=status,
            company_id=company_id,
            page=page,
            limit=limit,
        )

    def get_contact(self, contact_id: str, context: TenantContext) -> Contact:
        contact = self.repo.get_detail(contact_id, context.tenant_id)
        if not contact:
            raise NotFoundException("Contact not found")
        return contact

    def update_contact(
        self, contact_id: str, data: ContactUpdate, context: TenantContext
    ) -> Contact:
        contact = self._get_or_404(contact_id, context)
        changes = data.changes()

        self.references.check_links(context.tenant_id, company_id=changes.get("company_id"))

        for field, value in changes.items():
            setattr(contact, field, value)

        self.repo.update(contact)
        return self.repo.get_summary(contact_id, context.tenant_id)

    def delete_contact(self, contact_id: str, context: TenantContext) -> None:
        contact = self._get_or_404(contact_id, context)
        self.repo.delete(contact)
        logger.info("Deleted contact %s in tenant %s", contact_id, context.tenant_id)

    def get_stats(self, context: TenantContext) -> dict:
        tenant_id = context.tenant_id
        return {
            "total": self.repo.count(tenant_id),
            "active": self.repo.count(tenant_id, status=ContactStatus.ACTIVE),
            "prospects": self.repo.count(tenant_id, status=ContactStatus.PROSPECT),
            "without_company": self.repo.count(tenant_id, without_company=True),
        }
