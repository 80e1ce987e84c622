"""Notes router: /companies/{id}/notes for listing/creating, /notes/{id} for the rest."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.user import User
from crm_api.routers.deps import get_current_user
from crm_api.schemas.note import NoteCreate, NoteOut, NoteUpdate
from crm_api.services.note import NoteService

router = APIRouter(tags=["Notes"])


def _svc(session: AsyncSession) -> NoteService:
    return NoteService(session, settings.default_client_id)


@router.get("/companies/{company_id}/notes", response_model=ListResponse[NoteOut])
async def list_notes(
    company_id: str,
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = await _svc(session).list_notes(company_id, pagination)
    return paginated([NoteOut.model_validate(n) for n in items], total, pagination.page, pagination.limit)


@router.post(
    "/companies/{company_id}/notes",
    response_model=DataResponse[NoteOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_note(
    company_id: str,
    body: NoteCreate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    note = await _svc(session).create_note(company_id, body, user)
    return {"data": NoteOut.model_validate(note)}


@router.get("/notes/{note_id}", response_model=DataResponse[NoteOut])
async def get_note(
    note_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    note = await _svc(session).get_note(note_id)
    return {"data": NoteOut.model_validate(note)}


@router.put("/notes/{note_id}", response_model=DataResponse[NoteOut])
async def update_note(
    note_id: str,
    body: NoteUpdate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    note = await _svc(session).update_note(note_id, body, user)
    return {"data": NoteOut.model_validate(note)}


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _svc(session).delete_note(note_id, user)
