from datetime import datetime
from typing import Any

from crm_api.domain.tier_change import TierChangeLog
from crm_api.repositories.base import BaseRepository


class TierChangeLogRepository(BaseRepository[TierChangeLog]):
    model = TierChangeLog

    async def search(
        self,
        *,
        offset: int = 0,
        limit: int = 50,
        filters: dict[str, Any] | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> tuple[list[TierChangeLog], int]:
        q = self._apply_filters(self._base_query(), filters)
        if date_from is not None:
            q = q.where(TierChangeLog.created_at >= date_from)
        if date_to is not None:
            q = q.where(TierChangeLog.created_at <= date_to)
        return await self._paginate(q, offset=offset, limit=limit, order_by="created_at", order="desc")

    async def count_since(self, since: datetime) -> int:
        return await self._count(self._base_query().where(TierChangeLog.created_at >= since))
