"""In-app notification service.

Other services create notifications as a side effect (tier changes); the
router exposes the acting user's inbox.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.exceptions import ForbiddenError, NotFoundError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.enums import NotificationType
from crm_api.domain.notification import Notification
from crm_api.domain.user import User
from crm_api.repositories.notification import NotificationRepository


class NotificationService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._repo = NotificationRepository(session, client_id, clock)
        self._clock = clock

    async def create_notification(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related_company_id: str | None = None,
        scheduled_for: datetime | None = None,
    ) -> Notification:
        return await self._repo.create(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            related_company_id=related_company_id,
            scheduled_for=scheduled_for or self._clock(),
            is_read=False,
        )

    async def list_for_user(
        self, user: User, pagination: PaginationParams, unread_only: bool = False
    ):
        filters = {"user_id": user.id, "is_read": False if unread_only else None}
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def unread_count(self, user: User) -> int:
        return await self._repo.count({"user_id": user.id, "is_read": False})

    async def _get_owned(self, notification_id: str, user: User) -> Notification:
        notification = await self._repo.get_by_id(notification_id)
        if not notification:
            raise NotFoundError("Notification", notification_id)
        if notification.user_id != user.id:
            raise ForbiddenError("Notification belongs to another user")
        return notification

    async def mark_read(self, notification_id: str, user: User) -> Notification:
        await self._get_owned(notification_id, user)
        updated = await self._repo.update(notification_id, is_read=True)
        return updated  # type: ignore[return-value]

    async def mark_all_read(self, user: User) -> int:
        return await self._repo.mark_all_read(user.id)

    async def delete_notification(self, notification_id: str, user: User) -> None:
        await self._get_owned(notification_id, user)
        await self._repo.soft_delete(notification_id)
