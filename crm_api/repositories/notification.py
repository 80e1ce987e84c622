from sqlalchemy import update

from crm_api.domain.notification import Notification
from crm_api.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    async def mark_all_read(self, user_id: str) -> int:
        result = await self._session.execute(
            update(Notification)
            .where(Notification.client_id == self._client_id)
            .where(Notification.user_id == user_id)
            .where(Notification.is_read.is_(False))
            .where(Notification.deleted_at.is_(None))
            .values(is_read=True, updated_at=self._clock())
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount
