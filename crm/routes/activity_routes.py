from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crm.database import get_db
from crm.dependencies import get_tenant_context, Pagination
from crm.models.activity import ActivityStatus, ActivityType
from crm.models.tenant_context import TenantContext
from crm.services.activity_service import ActivityService, DEFAULT_UPCOMING_DAYS
from crm.schemas.common_schemas import PageResponse, PaginationMeta, MessageResponse
from crm.schemas.activity_schemas import (
    ActivityCreate,
    ActivityUpdate,
    ActivityResponse,
    ActivityStats,
)

router = APIRouter()


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
def create_activity(
    data: ActivityCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Create an activity.

    - assignedToId must be a user of the current tenant
    - Linked company, contact and deal must belong to the current tenant
    """
    service = ActivityService(db)
    return service.create_activity(data, context)


@router.get("", response_model=PageResponse[ActivityResponse])
def list_activities(
    search: Optional[str] = Query(None, description="Partial match on title or description"),
    type: Optional[ActivityType] = Query(None, description="Filter by type"),
    status: Optional[ActivityStatus] = Query(None, description="Filter by status"),
    assigned_to_id: Optional[str] = Query(None, alias="assignedToId"),
    company_id: Optional[str] = Query(None, alias="companyId"),
    contact_id: Optional[str] = Query(None, alias="contactId"),
    deal_id: Optional[str] = Query(None, alias="dealId"),
    overdue: bool = Query(False, description="Only pending activities past their due date"),
    pagination: Pagination = Depends(),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    List activities of the current tenant.

    Ordered by due date (soonest first, undated last), then newest first.
    """
    service = ActivityService(db)
    activities, total = service.get_activities(
        context,
        search=search,
        type=type,
        status=status,
        assigned_to_id=assigned_to_id,
        company_id=company_id,
        contact_id=contact_id,
        deal_id=deal_id,
        overdue=overdue,
        page=pagination.page,
        limit=pagination.limit,
    )
    return {
        "data": activities,
        "meta": PaginationMeta.build(total, pagination.page, pagination.limit),
    }


@router.get("/stats", response_model=ActivityStats)
def activity_stats(
    user_id: Optional[str] = Query(None, alias="userId", description="Restrict to one assignee"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = ActivityService(db)
    return service.get_stats(context, user_id)


@router.get("/upcoming", response_model=list[ActivityResponse])
def upcoming_activities(
    user_id: Optional[str] = Query(None, alias="userId", description="Restrict to one assignee"),
    days: int = Query(DEFAULT_UPCOMING_DAYS, ge=1, le=365, description="Look-ahead window"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Pending activities due within the next `days` days (at most 20)"""
    service = ActivityService(db)
    return service.get_upcoming(context, user_id=user_id, days=days)


@router.get("/{activity_id}", response_model=ActivityResponse)
def get_activity(
    activity_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = ActivityService(db)
    return service.get_activity(activity_id, context)


@router.patch("/{activity_id}", response_model=ActivityResponse)
def update_activity(
    activity_id: str,
    data: ActivityUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Update activity (partial).

    - Requires being the assignee or MANAGER or higher
    - Moving to COMPLETED stamps completedAt; leaving COMPLETED clears it
    """
    service = ActivityService(db)
    return service.update_activity(activity_id, data, context)


@router.delete("/{activity_id}", response_model=MessageResponse)
def delete_activity(
    activity_id: str,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Delete activity (assignee or MANAGER or higher)"""
    service = ActivityService(db)
    service.delete_activity(activity_id, context)
    return {"message": "Activity deleted successfully"}
