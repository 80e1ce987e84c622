"""Meetings router.

/upcoming and /completed/{company_id} are declared before /{meeting_id}.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import CollectionResponse, DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.user import User
from crm_api.routers.deps import get_current_user
from crm_api.schemas.meeting import (
    MeetingCreate,
    MeetingDetailOut,
    MeetingEdit,
    MeetingFilters,
    MeetingNotesRequest,
    MeetingOut,
    RsvpRequest,
)
from crm_api.services.meeting import MeetingService

router = APIRouter(prefix="/meetings", tags=["Meetings"])


def _svc(session: AsyncSession) -> MeetingService:
    return MeetingService(session, settings.default_client_id)


@router.post("", response_model=DataResponse[MeetingOut], status_code=status.HTTP_201_CREATED)
async def create_meeting(
    body: MeetingCreate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    meeting = await _svc(session).create_meeting(body, user)
    return {"data": MeetingOut.model_validate(meeting)}


@router.get("", response_model=ListResponse[MeetingOut])
async def list_meetings(
    company_id: Optional[str] = Query(default=None, alias="companyId"),
    created_by: Optional[str] = Query(default=None, alias="createdBy"),
    date_from: Optional[datetime] = Query(default=None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(default=None, alias="dateTo"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    filters = MeetingFilters(
        company_id=company_id, created_by=created_by, date_from=date_from, date_to=date_to
    )
    items, total = await _svc(session).list_meetings(pagination, filters)
    return paginated([MeetingOut.model_validate(m) for m in items], total, pagination.page, pagination.limit)


@router.get("/upcoming", response_model=CollectionResponse[MeetingDetailOut])
async def list_upcoming_meetings(
    days: Optional[int] = Query(default=None, ge=0, le=365),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Meetings not yet completed in the next ``days`` days (default 7)."""
    rows = await _svc(session).list_upcoming(days)
    return {"data": [MeetingDetailOut.from_row(m, c) for m, c in rows]}


@router.get("/completed/{company_id}", response_model=CollectionResponse[MeetingOut])
async def list_completed_meetings(
    company_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    meetings = await _svc(session).list_completed_for_company(company_id)
    return {"data": [MeetingOut.model_validate(m) for m in meetings]}


@router.get("/{meeting_id}", response_model=DataResponse[MeetingDetailOut])
async def get_meeting(
    meeting_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    meeting, company = await _svc(session).get_meeting(meeting_id)
    return {"data": MeetingDetailOut.from_row(meeting, company)}


@router.put("/{meeting_id}", response_model=DataResponse[MeetingOut])
async def update_meeting(
    meeting_id: str,
    body: MeetingEdit,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    meeting = await _svc(session).update_meeting(meeting_id, body, user)
    return {"data": MeetingOut.model_validate(meeting)}


@router.put("/{meeting_id}/rsvp", response_model=DataResponse[MeetingOut])
async def update_rsvp(
    meeting_id: str,
    body: RsvpRequest,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Record the acting user's GOING / NOT_GOING response."""
    meeting = await _svc(session).update_rsvp(meeting_id, user, body.response)
    return {"data": MeetingOut.model_validate(meeting)}


@router.put("/{meeting_id}/notes", response_model=DataResponse[MeetingOut])
async def add_meeting_notes(
    meeting_id: str,
    body: MeetingNotesRequest,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Record post-meeting notes; completes the meeting and updates the company's last meeting."""
    meeting = await _svc(session).add_meeting_notes(meeting_id, body.notes)
    return {"data": MeetingOut.model_validate(meeting)}


@router.delete("/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meeting(
    meeting_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _svc(session).delete_meeting(meeting_id, user)
