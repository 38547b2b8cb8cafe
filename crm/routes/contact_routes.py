from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crm.database import get_db
from crm.dependencies import get_tenant_context, Pagination
from crm.models.contact import ContactStatus
from crm.models.tenant_context import TenantContext
from crm.services.contact_service import ContactService
from crm.schemas.common_schemas import PageResponse, PaginationMeta, MessageResponse
from crm.schemas.contact_schemas import (
    ContactCreate,
    ContactUpdate,
    ContactResponse,
    ContactDetailResponse,
    ContactStats,
)

router = APIRouter()


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def create_contact(
    data: ContactCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Create a contact.

    - companyId, when given, must be a company of the current tenant
    """
    service = ContactService(db)
    return service.create_contact(data, context)


@router.get("", response_model=PageResponse[ContactResponse])
def list_contacts(
    search: Optional[str] = Query(None, description="Partial match on name, email or position"),
    status: Optional[ContactStatus] = Query(None, description="Filter by status"),
    company_id: Optional[str] = Query(None, alias="companyId", description="Filter by company"),
    pagination: Pagination = Depends(),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """List contacts of the current tenant, newest first"""
    service = ContactService(db)
    contacts, total = service.get_contacts(
        context,
        search=search,
        status=status,
        company_id=company_id,
        page=pagination.page,
        limit=pagination.limit,
    )
    return {
        "data": contacts,
        "meta": PaginationMeta.build(total, pagination.page, pagination.limit),
    }


@router.get("/stats", response_model=ContactStats)
def contact_stats(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = ContactService(db)
    return service.get_stats(context)


@router.get("/{contact_id}", response_model=ContactDetailResponse)
def get_contact(
    contact_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get contact with its company, deals and most recent activities and notes"""
    service = ContactService(db)
    return service.get_contact(contact_id, context)


@router.patch("/{contact_id}", response_model=ContactResponse)
def update_contact(
    contact_id: str,
    data: ContactUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Update contact details; set companyId to null to detach from the company"""
    service = ContactService(db)
    return service.update_contact(contact_id, data, context)


@router.delete("/{contact_id}", response_model=MessageResponse)
def delete_contact(
    contact_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = ContactService(db)
    service.delete_contact(contact_id, context)
    return {"message": "Contact deleted successfully"}
