import logging
from typing import Optional
from sqlalchemy.orm import Session

from crm.models.company import Company, CompanySize, CompanyStatus
from crm.models.tenant_context import TenantContext
from crm.repositories.company_repository import CompanyRepository
from crm.schemas.company_schemas import CompanyCreate, CompanyUpdate
from crm.core.exceptions import NotFoundException

logger = logging.getLogger(__name__)


class CompanyService:
    """Service layer for company business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CompanyRepository(db)

    def _get_or_404(self, company_id: str, context: TenantContext) -> Company:
        company = self.repo.get_by_id_and_tenant(company_id, context.tenant_id)
        if not company:
            raise NotFoundException("Company not found")
        return company

    def create_company(self, data: CompanyCreate, context: TenantContext) -> Company:
        """Create a company in the caller's tenant"""
        company = Company(tenant_id=context.tenant_id, **data.model_dump(exclude_none=True))
        company = self.repo.create(company)
        return self.repo.get_summary(company.id, context.tenant_id)

    def get_companies(
        self,
        context: TenantContext,
        search: Optional[str] = None,
        status: Optional[CompanyStatus] = None,
        size: Optional[CompanySize] = None,
        industry: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Company], int]:
        return self.repo.get_with_filters(
            tenant_id=context.tenant_id,
            search=search,
            status=status,
            size=size,
            industry=industry,
            page=page,
            limit=limit,
        )

    def get_company(self, company_id: str, context: TenantContext) -> Company:
        """
        Get company with contacts, deals and recent activities/notes.

        Raises:
            NotFoundException: If company doesn't exist or belongs to another tenant
        """
        company = self.repo.get_detail(company_id, context.tenant_id)
        if not company:
            raise NotFoundException("Company not found")
        return company

    def update_company(
        self, company_id: str, data: CompanyUpdate, context: TenantContext
    ) -> Company:
        company = self._get_or_404(company_id, context)

        for field, value in data.changes().items():
            setattr(company, field, value)

        self.repo.update(company)
        return self.repo.get_summary(company_id, context.tenant_id)

    def delete_company(self, company_id: str, context: TenantContext) -> None:
        """Hard delete; linked contacts, deals, activities and notes are detached"""
        company = self._get_or_404(company_id, context)
        self.repo.delete(company)
        logger.info("Deleted company %s in tenant %s", company_id, context.tenant_id)

    def get_stats(self, context: TenantContext) -> dict:
        tenant_id = context.tenant_id
        return {
            "total": self.repo.count(tenant_id),
            "active": self.repo.count(tenant_id, status=CompanyStatus.ACTIVE),
            "prospects": self.repo.count(tenant_id, status=CompanyStatus.PROSPECT),
            "by_size": {
                (size.value if size else "UNKNOWN"): count
                for size, count in self.repo.count_by_size(tenant_id)
            },
        }
