"""Notifications router: always scoped to the acting user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.user import User
from crm_api.routers.deps import get_current_user
from crm_api.schemas.common import CountResponse
from crm_api.schemas.notification import NotificationOut
from crm_api.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _svc(session: AsyncSession) -> NotificationService:
    return NotificationService(session, settings.default_client_id)


@router.get("", response_model=ListResponse[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = await _svc(session).list_for_user(user, pagination, unread_only=unread_only)
    return paginated(
        [NotificationOut.model_validate(n) for n in items], total, pagination.page, pagination.limit
    )


@router.get("/unread-count", response_model=DataResponse[CountResponse])
async def unread_count(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"data": CountResponse(count=await _svc(session).unread_count(user))}


@router.post("/read-all", response_model=DataResponse[CountResponse])
async def mark_all_read(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"data": CountResponse(count=await _svc(session).mark_all_read(user))}


@router.post("/{notification_id}/read", response_model=DataResponse[NotificationOut])
async def mark_read(
    notification_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    notification = await _svc(session).mark_read(notification_id, user)
    return {"data": NotificationOut.model_validate(notification)}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _svc(session).delete_notification(notification_id, user)
