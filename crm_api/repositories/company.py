from typing import Any

from sqlalchemy import func, select

from crm_api.domain.company import Company
from crm_api.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    model = Company

    async def search(
        self,
        *,
        query: str | None,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[Company], int]:
        """Paginated list with a case-insensitive name search on top of column filters."""
        q = self._apply_filters(self._base_query(), filters)
        if query:
            q = q.where(Company.name.ilike(f"%{query}%"))
        return await self._paginate(q, offset=offset, limit=limit, order_by=order_by, order=order)

    async def tier_distribution(self) -> dict[str, int]:
        sub = self._base_query().subquery()
        result = await self._session.execute(
            select(sub.c.tier, func.count()).group_by(sub.c.tier)
        )
        return {tier: count for tier, count in result.all()}
