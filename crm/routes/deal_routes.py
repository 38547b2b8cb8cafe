from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crm.database import get_db
from crm.dependencies import get_tenant_context, Pagination
from crm.models.deal import DealStage, DealStatus
from crm.models.tenant_context import TenantContext
from crm.services.deal_service import DealService
from crm.schemas.common_schemas import PageResponse, PaginationMeta, MessageResponse
from crm.schemas.deal_schemas import (
    DealCreate,
    DealUpdate,
    DealResponse,
    DealDetailResponse,
    DealStats,
    PipelineStage,
)

router = APIRouter()


@router.post("", response_model=DealResponse, status_code=status.HTTP_201_CREATED)
def create_deal(
    data: DealCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Create a deal.

    - ownerId must be a user of the current tenant
    - companyId and contactId, when given, must belong to the current tenant
    - Defaults: value 0, currency USD, stage PROSPECTING, status OPEN
    """
    service = DealService(db)
    return service.create_deal(data, context)


@router.get("", response_model=PageResponse[DealResponse])
def list_deals(
    search: Optional[str] = Query(None, description="Partial match on title or description"),
    stage: Optional[DealStage] = Query(None, description="Filter by stage"),
    status: Optional[DealStatus] = Query(None, description="Filter by status"),
    owner_id: Optional[str] = Query(None, alias="ownerId", description="Filter by owner"),
    company_id: Optional[str] = Query(None, alias="companyId", description="Filter by company"),
    contact_id: Optional[str] = Query(None, alias="contactId", description="Filter by contact"),
    pagination: Pagination = Depends(),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """List deals of the current tenant, newest first"""
    service = DealService(db)
    deals, total = service.get_deals(
        context,
        search=search,
        stage=stage,
        status=status,
        owner_id=owner_id,
        company_id=company_id,
        contact_id=contact_id,
        page=pagination.page,
        limit=pagination.limit,
    )
    return {
        "data": deals,
        "meta": PaginationMeta.build(total, pagination.page, pagination.limit),
    }


@router.get("/stats", response_model=DealStats)
def deal_stats(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Deal counts by status and stage, with total and average value"""
    service = DealService(db)
    return service.get_stats(context)


@router.get("/pipeline", response_model=list[PipelineStage])
def deal_pipeline(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Open deals per stage, in funnel order (stages without deals are omitted)"""
    service = DealService(db)
    return service.get_pipeline(context)


@router.get("/{deal_id}", response_model=DealDetailResponse)
def get_deal(
    deal_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = DealService(db)
    return service.get_deal(deal_id, context)


@router.patch("/{deal_id}", response_model=DealResponse)
def update_deal(
    deal_id: str,
    data: DealUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Update deal (partial); changed references are re-validated"""
    service = DealService(db)
    return service.update_deal(deal_id, data, context)


@router.delete("/{deal_id}", response_model=MessageResponse)
def delete_deal(
    deal_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = DealService(db)
    service.delete_deal(deal_id, context)
    return {"message": "Deal deleted successfully"}
