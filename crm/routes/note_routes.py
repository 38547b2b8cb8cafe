from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crm.database import get_db
from crm.dependencies import get_tenant_context, Pagination
from crm.models.tenant_context import TenantContext
from crm.services.note_service import NoteService
from crm.schemas.common_schemas import PageResponse, PaginationMeta, MessageResponse
from crm.schemas.note_schemas import NoteCreate, NoteUpdate, NoteResponse, NoteStats

router = APIRouter()


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    data: NoteCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Create a note authored by the current user"""
    service = NoteService(db)
    return service.create_note(data, context)


@router.get("", response_model=PageResponse[NoteResponse])
def list_notes(
    search: Optional[str] = Query(None, description="Partial match on content"),
    author_id: Optional[str] = Query(None, alias="authorId"),
    company_id: Optional[str] = Query(None, alias="companyId"),
    contact_id: Optional[str] = Query(None, alias="contactId"),
    deal_id: Optional[str] = Query(None, alias="dealId"),
    pagination: Pagination = Depends(),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """List notes of the current tenant, newest first"""
    service = NoteService(db)
    notes, total = service.get_notes(
        context,
        search=search,
        author_id=author_id,
        company_id=company_id,
        contact_id=contact_id,
        deal_id=deal_id,
        page=pagination.page,
        limit=pagination.limit,
    )
    return {
        "data": notes,
        "meta": PaginationMeta.build(total, pagination.page, pagination.limit),
    }


@router.get("/stats", response_model=NoteStats)
def note_stats(
    user_id: Optional[str] = Query(None, alias="userId", description="Restrict to one author"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = NoteService(db)
    return service.get_stats(context, user_id)


@router.get("/{note_id}", response_model=NoteResponse)
def get_note(
    note_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = NoteService(db)
    return service.get_note(note_id, context)


@router.patch("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: str,
    data: NoteUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Update note (author only)"""
    service = NoteService(db)
    return service.update_note(note_id, data, context)


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(
    note_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Delete note (author only)"""
    service = NoteService(db)
    service.delete_note(note_id, context)
    return {"message": "Note deleted successfully"}
