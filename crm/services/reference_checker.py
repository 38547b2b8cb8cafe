from typing import Optional
from sqlalchemy.orm import Session

from crm.models.user import User
from crm.repositories.user_repository import UserRepository
from crm.repositories.company_repository import CompanyRepository
from crm.repositories.contact_repository import ContactRepository
from crm.repositories.deal_repository import DealRepository
from crm.core.exceptions import NotFoundException


class ReferenceChecker:
    """
    Verifies that foreign keys supplied by a client point at rows of the
    caller's tenant before anything is written.

    A reference to a row of another tenant fails exactly like a reference
    to a row that does not exist.
    """

    def __init__(self, db: Session):
        self.user_repo = UserRepository(db)
        self.company_repo = CompanyRepository(db)
        self.contact_repo = ContactRepository(db)
        self.deal_repo = DealRepository(db)

    def require_user(self, user_id: str, tenant_id: str, label: str = "User") -> User:
        user = self.user_repo.get_by_id_and_tenant(user_id, tenant_id)
        if not user:
            raise NotFoundException(f"{label} not found")
        return user

    def check_links(
        self,
        tenant_id: str,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        deal_id: Optional[str] = None,
    ) -> None:
        """
        Validate the optional company/contact/deal links.

        Raises:
            NotFoundException: If a given id is not a row of the tenant
        """
        if company_id and not self.company_repo.get_by_id_and_tenant(company_id, tenant_id):
            raise NotFoundException("Company not found")

        if contact_id and not self.contact_repo.get_by_id_and_tenant(contact_id, tenant_id):
            raise NotFoundException("Contact not found")

        if deal_id and not self.deal_repo.get_by_id_and_tenant(deal_id, tenant_id):
            raise NotFoundException("Deal not found")
