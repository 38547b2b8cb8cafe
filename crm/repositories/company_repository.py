from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload

from crm.models.company import Company, CompanySize, CompanyStatus
from crm.models.contact import Contact
from crm.models.deal import Deal
from crm.models.activity import Activity
from crm.models.note import Note
from crm.repositories.base import TenantScopedRepository


class CompanyRepository(TenantScopedRepository[Company]):
    """Repository for Company data access"""

    model = Company
    count_columns = {
        "contacts": Contact.company_id,
        "deals": Deal.company_id,
        "activities": Activity.company_id,
    }

    def detail_options(self):
        return [
            selectinload(Company.contacts),
            selectinload(Company.deals).joinedload(Deal.owner),
            selectinload(Company.activities).joinedload(Activity.assigned_to),
            selectinload(Company.notes).joinedload(Note.author),
        ]

    def get_with_filters(
        self,
        tenant_id: str,
        search: Optional[str] = None,
        status: Optional[CompanyStatus] = None,
        size: Optional[CompanySize] = None,
        industry: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Company], int]:
        """
        Get companies with filters, ensuring multi-tenant isolation.

        Args:
            tenant_id: Tenant ID for isolation
            search: Case-insensitive partial match on name, email or industry
            status: Exact status filter
            size: Exact size filter
            industry: Exact industry filter
            page: 1-indexed page number
            limit: Page size

        Returns:
            Tuple of (companies list, total count)
        """
        query = self.scoped(tenant_id)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Company.name.ilike(pattern),
                    Company.email.ilike(pattern),
                    Company.industry.ilike(pattern),
                )
            )

        if status is not None:
            query = query.filter(Company.status == status)

        if size is not None:
            query = query.filter(Company.size == size)

        if industry is not None:
            query = query.filter(Company.industry == industry)

        return self.paginate(query, page, limit, Company.created_at.desc())

    def count(self, tenant_id: str, status: Optional[CompanyStatus] = None) -> int:
        query = self.scoped(tenant_id)
        if status is not None:
            query = query.filter(Company.status == status)
        return query.count()

    def count_by_size(self, tenant_id: str) -> list[tuple[CompanySize | None, int]]:
        return (
            self.db.query(Company.size, func.count(Company.id))
            .filter(Company.tenant_id == tenant_id)
            .group_by(Company.size)
            .all()
        )
