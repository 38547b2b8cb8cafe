import logging
from typing import Optional
from sqlalchemy.orm import Session

from crm.models.activity import Activity, ActivityStatus, ActivityType
from crm.models.base import utcnow
from crm.models.role import UserRole
from crm.models.tenant_context import TenantContext
from crm.repositories.activity_repository import ActivityRepository
from crm.schemas.activity_schemas import ActivityCreate, ActivityUpdate
from crm.services.reference_checker import ReferenceChecker
from crm.core.exceptions import ForbiddenException, NotFoundException

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_DAYS = 7


class ActivityService:
    """
    Service layer for activity business logic.

    Keeps completed_at in step with status: it is stamped when an activity
    becomes COMPLETED and cleared when it moves to any other status.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ActivityRepository(db)
        self.references = ReferenceChecker(db)

    def _get_or_404(self, activity_id: str, context: TenantContext) -> Activity:
        activity = self.repo.get_by_id_and_tenant(activity_id, context.tenant_id)
        if not activity:
            raise NotFoundException("Activity not found")
        return activity

    def _ensure_can_modify(self, activity: Activity, context: TenantContext) -> None:
        # Managers and admins act on behalf of any assignee
        if activity.assigned_to_id == context.user_id:
            return
        if context.has_permission(UserRole.MANAGER):
            return
        logger.warning(
            "User %s denied access to activity %s assigned to %s",
            context.user_id,
            activity.id,
            activity.assigned_to_id,
        )
        raise ForbiddenException("Only the assignee or a manager can modify this activity")

    def create_activity(self, data: ActivityCreate, context: TenantContext) -> Activity:
        """
        Create an activity in the caller's tenant.

        Raises:
            NotFoundException: If the assignee or a linked company/contact/deal
                is not a row of the tenant
        """
        self.references.require_user(data.assigned_to_id, context.tenant_id, label="Assigned user")
        self.references.check_links(
            context.tenant_id,
            company_id=data.company_id,
            contact_id=data.contact_id,
            deal_id=data.deal_id,
        )

        activity = Activity(tenant_id=context.tenant_id, **data.model_dump(exclude_none=True))
        if activity.status == ActivityStatus.COMPLETED:
            activity.completed_at = utcnow()

        activity = self.repo.create(activity)
        return self.repo.get_summary(activity.id, context.tenant_id)

    def get_activities(
        self,
        context: TenantContext,
        search: Optional[str] = None,
        type: Optional[ActivityType] = None,
        status: Optional[ActivityStatus] = None,
        assigned_to_id: Optional[str] = None,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        deal_id: Optional[str] = None,
        overdue: bool = False,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Activity], int]:
        return self.repo.get_with_filters(
            tenant_id=context.tenant_id,
            search=search,
            type=type,
            status=status,
            assigned_to_id=assigned_to_id,
            company_id=company_id,
            contact_id=contact_id,
            deal_id=deal_id,
            overdue=overdue,
            page=page,
            limit=limit,
        )

    def get_activity(self, activity_id: str, context: TenantContext) -> Activity:
        activity = self.repo.get_summary(activity_id, context.tenant_id)
        if not activity:
            raise NotFoundException("Activity not found")
        return activity

    def update_activity(
        self, activity_id: str, data: ActivityUpdate, context: TenantContext
    ) -> Activity:
        activity = self._get_or_404(activity_id, context)
        self._ensure_can_modify(activity, context)
        changes = data.changes()

        if "assigned_to_id" in changes:
            self.references.require_user(
                changes["assigned_to_id"], context.tenant_id, label="Assigned user"
            )
        self.references.check_links(
            context.tenant_id,
            company_id=changes.get("company_id"),
            contact_id=changes.get("contact_id"),
            deal_id=changes.get("deal_id"),
        )

        if "status" in changes:
            if changes["status"] == ActivityStatus.COMPLETED:
                if activity.status != ActivityStatus.COMPLETED or activity.completed_at is None:
                    activity.completed_at = utcnow()
            else:
                activity.completed_at = None

        for field, value in changes.items():
            setattr(activity, field, value)

        self.repo.update(activity)
        return self.repo.get_summary(activity_id, context.tenant_id)

    def delete_activity(self, activity_id: str, context: TenantContext) -> None:
        activity = self._get_or_404(activity_id, context)
        self._ensure_can_modify(activity, context)
        self.repo.delete(activity)
        logger.info("Deleted activity %s in tenant %s", activity_id, context.tenant_id)

    def get_stats(self, context: TenantContext, user_id: Optional[str] = None) -> dict:
        """Activity counts for the tenant, optionally restricted to one assignee"""
        tenant_id = context.tenant_id
        return {
            "total": self.repo.count(tenant_id, assigned_to_id=user_id),
            "planned": self.repo.count(
                tenant_id, assigned_to_id=user_id, status=ActivityStatus.PLANNED
            ),
            "in_progress": self.repo.count(
                tenant_id, assigned_to_id=user_id, status=ActivityStatus.IN_PROGRESS
            ),
            "completed": self.repo.count(
                tenant_id, assigned_to_id=user_id, status=ActivityStatus.COMPLETED
            ),
            "overdue": self.repo.count(tenant_id, assigned_to_id=user_id, overdue=True),
            "by_type": {
                activity_type.value: count
                for activity_type, count in self.repo.count_by_type(
                    tenant_id, assigned_to_id=user_id
                )
            },
        }

    def get_upcoming(
        self,
        context: TenantContext,
        user_id: Optional[str] = None,
        days: int = DEFAULT_UPCOMING_DAYS,
    ) -> list[Activity]:
        return self.repo.get_upcoming(context.tenant_id, days, assigned_to_id=user_id)
