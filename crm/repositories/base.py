"""Shared data access for tenant-scoped tables."""

from typing import Generic, TypeVar
from sqlalchemy import func
from sqlalchemy.orm import InstrumentedAttribute, Session, Query
from sqlalchemy.orm.interfaces import LoaderOption

from crm.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class TenantScopedRepository(Generic[ModelT]):
    """
    Base repository for models carrying a tenant_id column.

    Every read starts from `scoped()`, which anchors the query on the
    caller's tenant. A row that exists under another tenant is therefore
    indistinguishable from a missing row.
    """

    model: type[ModelT]

    # Response count key -> foreign key column on the child table
    count_columns: dict[str, InstrumentedAttribute] = {}

    def __init__(self, db: Session):
        self.db = db

    def scoped(self, tenant_id: str) -> Query:
        """Base query restricted to one tenant"""
        return self.db.query(self.model).filter(self.model.tenant_id == tenant_id)

    def summary_options(self) -> list[LoaderOption]:
        """Relations loaded for list, create and update responses"""
        return []

    def detail_options(self) -> list[LoaderOption]:
        """Relations loaded for single-resource responses"""
        return self.summary_options()

    def get_by_id_and_tenant(self, entity_id: str, tenant_id: str) -> ModelT | None:
        """
        Get row ensuring it belongs to tenant (multi-tenant safety).

        Returns None if row doesn't exist or belongs to another tenant.
        """
        return self.scoped(tenant_id).filter(self.model.id == entity_id).first()

    def attach_counts(self, rows: list[ModelT]) -> list[ModelT]:
        """
        Set `counts` on each row from one grouped COUNT query per child table.

        Rows without children get zero for every key.
        """
        if not self.count_columns or not rows:
            return rows

        ids = [row.id for row in rows]
        counts = {row.id: dict.fromkeys(self.count_columns, 0) for row in rows}

        for key, parent_column in self.count_columns.items():
            grouped = (
                self.db.query(parent_column, func.count())
                .filter(parent_column.in_(ids))
                .group_by(parent_column)
                .all()
            )
            for parent_id, total in grouped:
                counts[parent_id][key] = total

        for row in rows:
            row.counts = counts[row.id]
        return rows

    def _get_one(self, entity_id: str, tenant_id: str, options) -> ModelT | None:
        entity = (
            self.scoped(tenant_id)
            .filter(self.model.id == entity_id)
            .options(*options)
            .first()
        )
        if entity is not None:
            self.attach_counts([entity])
        return entity

    def get_summary(self, entity_id: str, tenant_id: str) -> ModelT | None:
        return self._get_one(entity_id, tenant_id, self.summary_options())

    def get_detail(self, entity_id: str, tenant_id: str) -> ModelT | None:
        return self._get_one(entity_id, tenant_id, self.detail_options())

    def paginate(self, query: Query, page: int, limit: int, *order_by) -> tuple[list[ModelT], int]:
        """
        Apply ordering and 1-indexed page/limit to a query.

        Returns:
            Tuple of (rows for the page, total matching rows)
        """
        # Get total count before pagination
        total = query.count()

        rows = (
            query.options(*self.summary_options())
            .order_by(*order_by)
            .limit(limit)
            .offset((page - 1) * limit)
            .all()
        )
        return self.attach_counts(rows), total

    def create(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: ModelT) -> ModelT:
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.commit()
