from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crm.database import get_db
from crm.dependencies import get_tenant_context, Pagination
from crm.models.company import CompanySize, CompanyStatus
from crm.models.tenant_context import TenantContext
from crm.services.company_service import CompanyService
from crm.schemas.common_schemas import PageResponse, PaginationMeta, MessageResponse
from crm.schemas.company_schemas import (
    CompanyCreate,
    CompanyUpdate,
    CompanyResponse,
    CompanyDetailResponse,
    CompanyStats,
)

router = APIRouter()


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
def create_company(
    data: CompanyCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Create a company in the current tenant"""
    service = CompanyService(db)
    return service.create_company(data, context)


@router.get("", response_model=PageResponse[CompanyResponse])
def list_companies(
    search: Optional[str] = Query(None, description="Partial match on name, email or industry"),
    status: Optional[CompanyStatus] = Query(None, description="Filter by status"),
    size: Optional[CompanySize] = Query(None, description="Filter by size"),
    industry: Optional[str] = Query(None, description="Filter by industry"),
    pagination: Pagination = Depends(),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    List companies of the current tenant, newest first.

    Each company carries counts of its contacts, deals and activities.
    """
    service = CompanyService(db)
    companies, total = service.get_companies(
        context,
        search=search,
        status=status,
        size=size,
        industry=industry,
        page=pagination.page,
        limit=pagination.limit,
    )
    return {
        "data": companies,
        "meta": PaginationMeta.build(total, pagination.page, pagination.limit),
    }


@router.get("/stats", response_model=CompanyStats)
def company_stats(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Company totals by status and size"""
    service = CompanyService(db)
    return service.get_stats(context)


@router.get("/{company_id}", response_model=CompanyDetailResponse)
def get_company(
    company_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get company with its contacts, deals and most recent activities and notes"""
    service = CompanyService(db)
    return service.get_company(company_id, context)


@router.patch("/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: str,
    data: CompanyUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Update company details (partial)"""
    service = CompanyService(db)
    return service.update_company(company_id, data, context)


@router.delete("/{company_id}", response_model=MessageResponse)
def delete_company(
    company_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Delete a company.

    Contacts, deals, activities and notes linked to it are kept and detached.
    """
    service = CompanyService(db)
    service.delete_company(company_id, context)
    return {"message": "Company deleted successfully"}
