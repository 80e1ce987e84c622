"""Note service: free-text notes attached to companies."""


from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.exceptions import ForbiddenError, NotFoundError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.note import Note
from crm_api.domain.user import User
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.note import NoteRepository
from crm_api.schemas.note import NoteCreate, NoteUpdate
from crm_api.services.tier import can_override

class NoteService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._repo = NoteRepository(session, client_id, clock)
        self._companies = CompanyRepository(session, client_id, clock)

    async def _ensure_company(self, company_id: str) -> None:
        if not await self._companies.get_by_id(company_id):
            raise NotFoundError("Company", company_id)

    async def list_notes(self, company_id: str, pagination: PaginationParams):
        await self._ensure_company(company_id)
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"company_id": company_id},
        )

    async def get_note(self, note_id: str) -> Note:
        note = await self._repo.get_by_id(note_id)
        if not note:
            raise NotFoundError("Note", note_id)
        return note

    async def create_note(self, company_id: str, data: NoteCreate, author: User) -> Note:
        await self._ensure_company(company_id)
        return await self._repo.create(
            company_id=company_id, content=data.content, created_by=author.id
        )

    async def _get_editable(self, note_id: str, user: User) -> Note:
        note = await self.get_note(note_id)
        if note.created_by != user.id and not can_override(user):
            raise ForbiddenError("Only the author or an admin can change this note")
        return note

    async def update_note(self, note_id: str, data: NoteUpdate, user: User) -> Note:
        await self._get_editable(note_id, user)
        updated = await self._repo.update(note_id, content=data.content)
        return updated  # type: ignore[return-value]

    async def delete_note(self, note_id: str, user: User) -> None:
        await self._get_editable(note_id, user)
        await self._repo.soft_delete(note_id)
