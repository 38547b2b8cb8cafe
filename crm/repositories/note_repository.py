from datetime import datetime
from typing import Optional
from sqlalchemy.orm import joinedload

from crm.models.note import Note
from crm.repositories.base import TenantScopedRepository


class NoteRepository(TenantScopedRepository[Note]):
    """Repository for Note data access"""

    model = Note

    def summary_options(self):
        return [
            joinedload(Note.author),
            joinedload(Note.company),
            joinedload(Note.contact),
            joinedload(Note.deal),
        ]

    def get_with_filters(
        self,
        tenant_id: str,
        search: Optional[str] = None,
        author_id: Optional[str] = None,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        deal_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Note], int]:
        """Get notes with filters (search matches content), newest first"""
        query = self.scoped(tenant_id)

        if search:
            query = query.filter(Note.content.ilike(f"%{search}%"))

        if author_id is not None:
            query = query.filter(Note.author_id == author_id)

        if company_id is not None:
            query = query.filter(Note.company_id == company_id)

        if contact_id is not None:
            query = query.filter(Note.contact_id == contact_id)

        if deal_id is not None:
            query = query.filter(Note.deal_id == deal_id)

        return self.paginate(query, page, limit, Note.created_at.desc())

    def count(
        self,
        tenant_id: str,
        author_id: Optional[str] = None,
        since: Optional[datetime] = None,
        linked_to: Optional[str] = None,
        unattached: bool = False,
    ) -> int:
        """
        Count notes of one tenant.

        Args:
            author_id: Restrict to one author
            since: Only notes created at or after this instant
            linked_to: "company", "contact" or "deal" - only notes with that link set
            unattached: Only notes linked to nothing
        """
        query = self.scoped(tenant_id)
        if author_id is not None:
            query = query.filter(Note.author_id == author_id)
        if since is not None:
            query = query.filter(Note.created_at >= since)
        if linked_to is not None:
            column = getattr(Note, f"{linked_to}_id")
            query = query.filter(column.is_not(None))
        if unattached:
            query = query.filter(
                Note.company_id.is_(None),
                Note.contact_id.is_(None),
                Note.deal_id.is_(None),
            )
        return query.count()
