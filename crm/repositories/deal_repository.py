from decimal import Decimal
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload, joinedload

from crm.models.deal import Deal, DealStage, DealStatus
from crm.models.activity import Activity
from crm.models.note import Note
from crm.repositories.base import TenantScopedRepository


class DealRepository(TenantScopedRepository[Deal]):
    """Repository for Deal data access"""

    model = Deal
    count_columns = {
        "activities": Activity.deal_id,
        "notes": Note.deal_id,
    }

    def summary_options(self):
        return [
            joinedload(Deal.company),
            joinedload(Deal.contact),
            joinedload(Deal.owner),
        ]

    def detail_options(self):
        return [
            joinedload(Deal.company),
            joinedload(Deal.contact),
            joinedload(Deal.owner),
            selectinload(Deal.activities).joinedload(Activity.assigned_to),
            selectinload(Deal.notes).joinedload(Note.author),
        ]

    def get_with_filters(
        self,
        tenant_id: str,
        search: Optional[str] = None,
        stage: Optional[DealStage] = None,
        status: Optional[DealStatus] = None,
        owner_id: Optional[str] = None,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Deal], int]:
        """
        Get deals with filters, ensuring multi-tenant isolation.

        Search is a case-insensitive partial match on title or description.
        """
        query = self.scoped(tenant_id)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Deal.title.ilike(pattern), Deal.description.ilike(pattern)))

        if stage is not None:
            query = query.filter(Deal.stage == stage)

        if status is not None:
            query = query.filter(Deal.status == status)

        if owner_id is not None:
            query = query.filter(Deal.owner_id == owner_id)

        if company_id is not None:
            query = query.filter(Deal.company_id == company_id)

        if contact_id is not None:
            query = query.filter(Deal.contact_id == contact_id)

        return self.paginate(query, page, limit, Deal.created_at.desc())

    def count(self, tenant_id: str, status: Optional[DealStatus] = None) -> int:
        query = self.scoped(tenant_id)
        if status is not None:
            query = query.filter(Deal.status == status)
        return query.count()

    def totals_by_stage(
        self, tenant_id: str, status: Optional[DealStatus] = None
    ) -> list[tuple[DealStage, int, Decimal | None]]:
        """Per-stage (stage, count, value sum) rows for one tenant"""
        query = (
            self.db.query(Deal.stage, func.count(Deal.id), func.sum(Deal.value))
            .filter(Deal.tenant_id == tenant_id)
        )
        if status is not None:
            query = query.filter(Deal.status == status)
        return query.group_by(Deal.stage).all()

    def value_sum_and_avg(self, tenant_id: str) -> tuple[Decimal | None, Decimal | None]:
        return (
            self.db.query(func.sum(Deal.value), func.avg(Deal.value))
            .filter(Deal.tenant_id == tenant_id)
            .one()
        )
