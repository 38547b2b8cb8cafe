import logging
from typing import Optional
from sqlalchemy.orm import Session

from crm.models.deal import Deal, DealStage, DealStatus
from crm.models.tenant_context import TenantContext
from crm.repositories.deal_repository import DealRepository
from crm.schemas.deal_schemas import DealCreate, DealUpdate
from crm.services.reference_checker import ReferenceChecker
from crm.core.exceptions import NotFoundException

logger = logging.getLogger(__name__)


class DealService:
    """Service layer for deal business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DealRepository(db)
        self.references = ReferenceChecker(db)

    def _get_or_404(self, deal_id: str, context: TenantContext) -> Deal:
        deal = self.repo.get_by_id_and_tenant(deal_id, context.tenant_id)
        if not deal:
            raise NotFoundException("Deal not found")
        return deal

    def create_deal(self, data: DealCreate, context: TenantContext) -> Deal:
        """
        Create a deal in the caller's tenant.

        Raises:
            NotFoundException: If owner, company or contact is not a row of the tenant
        """
        self.references.require_user(data.owner_id, context.tenant_id, label="Owner")
        self.references.check_links(
            context.tenant_id, company_id=data.company_id, contact_id=data.contact_id
        )

        deal = Deal(tenant_id=context.tenant_id, **data.model_dump(exclude_none=True))
        deal = self.repo.create(deal)
        return self.repo.get_summary(deal.id, context.tenant_id)

    def get_deals(
        self,
        context: TenantContext,
        search: Optional[str] = None,
        stage: Optional[DealStage] = None,
        status: Optional[DealStatus] = None,
        owner_id: Optional[str] = None,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Deal], int]:
        return self.repo.get_with_filters(
            tenant_id=context.tenant_id,
            search=search,
            stage=stage,
            status=status,
            owner_id=owner_id,
            company_id=company_id,
            contact_id=contact_id,
            page=page,
            limit=limit,
        )

    def get_deal(self, deal_id: str, context: TenantContext) -> Deal:
        deal = self.repo.get_detail(deal_id, context.tenant_id)
        if not deal:
            raise NotFoundException("Deal not found")
        return deal

    def update_deal(self, deal_id: str, data: DealUpdate, context: TenantContext) -> Deal:
        deal = self._get_or_404(deal_id, context)
        changes = data.changes()

        if "owner_id" in changes:
            self.references.require_user(changes["owner_id"], context.tenant_id, label="Owner")
        self.references.check_links(
            context.tenant_id,
            company_id=changes.get("company_id"),
            contact_id=changes.get("contact_id"),
        )

        for field, value in changes.items():
            setattr(deal, field, value)

        self.repo.update(deal)
        return self.repo.get_summary(deal_id, context.tenant_id)

    def delete_deal(self, deal_id: str, context: TenantContext) -> None:
        deal = self._get_or_404(deal_id, context)
        self.repo.delete(deal)
        logger.info("Deleted deal %s in tenant %s", deal_id, context.tenant_id)

    def get_stats(self, context: TenantContext) -> dict:
        tenant_id = context.tenant_id
        total_value, avg_value = self.repo.value_sum_and_avg(tenant_id)

        return {
            "total": self.repo.count(tenant_id),
            "open": self.repo.count(tenant_id, status=DealStatus.OPEN),
            "won": self.repo.count(tenant_id, status=DealStatus.WON),
            "lost": self.repo.count(tenant_id, status=DealStatus.LOST),
            "by_stage": {
                stage.value: {"count": count, "value": float(value or 0)}
                for stage, count, value in self.repo.totals_by_stage(tenant_id)
            },
            "total_value": float(total_value or 0),
            "avg_value": float(avg_value or 0),
        }

    def get_pipeline(self, context: TenantContext) -> list[dict]:
        """Open deals grouped by stage, in funnel order"""
        totals = {
            stage: (count, value)
            for stage, count, value in self.repo.totals_by_stage(
                context.tenant_id, status=DealStatus.OPEN
            )
        }

        return [
            {"stage": stage, "count": totals[stage][0], "value": float(totals[stage][1] or 0)}
            for stage in DealStage
            if stage in totals
        ]
