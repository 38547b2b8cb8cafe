import logging
from datetime import timedelta
from typing import Optional
from sqlalchemy.orm import Session

from crm.models.base import utcnow
from crm.models.note import Note
from crm.models.tenant_context import TenantContext
from crm.repositories.note_repository import NoteRepository
from crm.schemas.note_schemas import NoteCreate, NoteUpdate
from crm.services.reference_checker import ReferenceChecker
from crm.core.exceptions import ForbiddenException, NotFoundException

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)


class NoteService:
    """Service layer for note business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NoteRepository(db)
        self.references = ReferenceChecker(db)

    def _get_own_note(self, note_id: str, context: TenantContext) -> Note:
        note = self.repo.get_by_id_and_tenant(note_id, context.tenant_id)
        if not note:
            raise NotFoundException("Note not found")
        if note.author_id != context.user_id:
            logger.warning("User %s denied access to note %s", context.user_id, note_id)
            raise ForbiddenException("Only the author can modify this note")
        return note

    def create_note(self, data: NoteCreate, context: TenantContext) -> Note:
        """
        Create a note authored by the caller.

        Raises:
            NotFoundException: If a linked company/contact/deal is not a row of the tenant
        """
        self.references.check_links(
            context.tenant_id,
            company_id=data.company_id,
            contact_id=data.contact_id,
            deal_id=data.deal_id,
        )

        note = Note(
            tenant_id=context.tenant_id,
            author_id=context.user_id,
            **data.model_dump(exclude_none=True),
        )
        note = self.repo.create(note)
        return self.repo.get_summary(note.id, context.tenant_id)

    def get_notes(
        self,
        context: TenantContext,
        search: Optional[str] = None,
        author_id: Optional[str] = None,
        company_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        deal_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Note], int]:
        return self.repo.get_with_filters(
            tenant_id=context.tenant_id,
            search=search,
            author_id=author_id,
            company_id=company_id,
            contact_id=contact_id,
            deal_id=deal_id,
            page=page,
            limit=limit,
        )

    def get_note(self, note_id: str, context: TenantContext) -> Note:
        note = self.repo.get_summary(note_id, context.tenant_id)
        if not note:
            raise NotFoundException("Note not found")
        return note

    def update_note(self, note_id: str, data: NoteUpdate, context: TenantContext) -> Note:
        note = self._get_own_note(note_id, context)
        changes = data.changes()

        self.references.check_links(
            context.tenant_id,
            company_id=changes.get("company_id"),
            contact_id=changes.get("contact_id"),
            deal_id=changes.get("deal_id"),
        )

        for field, value in changes.items():
            setattr(note, field, value)

        self.repo.update(note)
        return self.repo.get_summary(note_id, context.tenant_id)

    def delete_note(self, note_id: str, context: TenantContext) -> None:
        note = self._get_own_note(note_id, context)
        self.repo.delete(note)
        logger.info("Deleted note %s in tenant %s", note_id, context.tenant_id)

    def get_stats(self, context: TenantContext, user_id: Optional[str] = None) -> dict:
        tenant_id = context.tenant_id
        return {
            "total": self.repo.count(tenant_id, author_id=user_id),
            "recent_count": self.repo.count(
                tenant_id, author_id=user_id, since=utcnow() - RECENT_WINDOW
            ),
            "by_entity": {
                "companies": self.repo.count(tenant_id, author_id=user_id, linked_to="company"),
                "contacts": self.repo.count(tenant_id, author_id=user_id, linked_to="contact"),
                "deals": self.repo.count(tenant_id, author_id=user_id, linked_to="deal"),
                "unattached": self.repo.count(tenant_id, author_id=user_id, unattached=True),
            },
        }
