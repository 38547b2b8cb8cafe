from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload

from crm.models.activity import Activity, ActivityStatus, ActivityType, PENDING_STATUSES
from crm.models.base import utcnow
from crm.repositories.base import TenantScopedRepository

UPCOMING_LIMIT = 20


class ActivityRepository(TenantScopedRepository[Activity]):
    """Repository for Activity data access"""

    model = Activity

    def summary_options(self):
        return [
            joinedload(Activity.assigned_to),
            joinedload(Activity.company),
            joinedload(Activity.contact),
            joinedload(Activity.deal),
        ]

    @staticmethod
    def _overdue_clause(now: datetime):
        return (Activity.due_date < now) & Activity.status.in_(PENDING_STATUSES)

    def get_with_filters(
        self,
        tenant_id: str,
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
        """
        Get activities with filters, ensuring multi-tenant isolation.

        Args:
            tenant_id: Tenant ID for isolation
            search: Case-insensitive partial match on title or description
            type: Exact type filter
            status: Exact status filter
            assigned_to_id / company_id / contact_id / deal_id: Exact link filters
            overdue: Only pending activities whose due date has passed
                (takes precedence over `status`)
            page: 1-indexed page number
            limit: Page size

        Returns:
            Tuple of (activities list, total count), ordered by due date
            ascending (undated last) then newest first
        """
        query = self.scoped(tenant_id)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Activity.title.ilike(pattern), Activity.description.ilike(pattern))
            )

        if type is not None:
            query = query.filter(Activity.type == type)

        if overdue:
            query = query.filter(self._overdue_clause(utcnow()))
        elif status is not None:
            query = query.filter(Activity.status == status)

        if assigned_to_id is not None:
            query = query.filter(Activity.assigned_to_id == assigned_to_id)

        if company_id is not None:
            query = query.filter(Activity.company_id == company_id)

        if contact_id is not None:
            query = query.filter(Activity.contact_id == contact_id)

        if deal_id is not None:
            query = query.filter(Activity.deal_id == deal_id)

        return self.paginate(
            query,
            page,
            limit,
            Activity.due_date.is_(None),
            Activity.due_date.asc(),
            Activity.created_at.desc(),
        )

    def get_upcoming(
        self, tenant_id: str, days: int, assigned_to_id: Optional[str] = None
    ) -> list[Activity]:
        """Pending activities due within the next `days` days, soonest first"""
        now = utcnow()
        query = self.scoped(tenant_id).filter(
            Activity.due_date >= now,
            Activity.due_date <= now + timedelta(days=days),
            Activity.status.in_(PENDING_STATUSES),
        )
        if assigned_to_id is not None:
            query = query.filter(Activity.assigned_to_id == assigned_to_id)

        return (
            query.options(*self.summary_options())
            .order_by(Activity.due_date.asc())
            .limit(UPCOMING_LIMIT)
            .all()
        )

    def count(
        self,
        tenant_id: str,
        assigned_to_id: Optional[str] = None,
        status: Optional[ActivityStatus] = None,
        overdue: bool = False,
    ) -> int:
        query = self.scoped(tenant_id)
        if assigned_to_id is not None:
            query = query.filter(Activity.assigned_to_id == assigned_to_id)
        if status is not None:
            query = query.filter(Activity.status == status)
        if overdue:
            query = query.filter(self._overdue_clause(utcnow()))
        return query.count()

    def count_by_type(
        self, tenant_id: str, assigned_to_id: Optional[str] = None
    ) -> list[tuple[ActivityType, int]]:
        query = self.db.query(Activity.type, func.count(Activity.id)).filter(
            Activity.tenant_id == tenant_id
        )
        if assigned_to_id is not None:
            query = query.filter(Activity.assigned_to_id == assigned_to_id)
        return query.group_by(Activity.type).all()
