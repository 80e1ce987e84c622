"""Meeting repository: date-window listings joined to live companies."""

from datetime import datetime
from typing import Any

from sqlalchemy import select

from crm_api.domain.company import Company
from crm_api.domain.enums import MeetingStatus
from crm_api.domain.meeting import Meeting
from crm_api.repositories.base import BaseRepository


class MeetingRepository(BaseRepository[Meeting]):
    model = Meeting

    def _with_live_company(self):
        return (
            select(Meeting, Company)
            .join(Company, Company.id == Meeting.company_id)
            .where(Meeting.client_id == self._client_id)
            .where(Meeting.deleted_at.is_(None))
            .where(Company.deleted_at.is_(None))
        )

    async def get_with_company(self, meeting_id: str) -> tuple[Meeting, Company] | None:
        result = await self._session.execute(self._with_live_company().where(Meeting.id == meeting_id))
        row = result.first()
        return (row[0], row[1]) if row else None

    async def search(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "scheduled_date",
        order: str = "asc",
        filters: dict[str, Any] | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> tuple[list[Meeting], int]:
        q = self._apply_filters(self._base_query(), filters)
        if date_from is not None:
            q = q.where(Meeting.scheduled_date >= date_from)
        if date_to is not None:
            q = q.where(Meeting.scheduled_date <= date_to)
        live_companies = select(Company.id).where(Company.deleted_at.is_(None))
        q = q.where(Meeting.company_id.in_(live_companies))
        return await self._paginate(q, offset=offset, limit=limit, order_by=order_by, order=order)

    async def list_in_window(self, start: datetime, end: datetime) -> list[tuple[Meeting, Company]]:
        """Meetings not yet completed whose date falls in [start, end], soonest first."""
        result = await self._session.execute(
            self._with_live_company()
            .where(Meeting.status != MeetingStatus.COMPLETED.value)
            .where(Meeting.scheduled_date >= start)
            .where(Meeting.scheduled_date <= end)
            .order_by(Meeting.scheduled_date.asc())
        )
        return [(m, c) for m, c in result.all()]

    async def list_completed_for_company(self, company_id: str) -> list[Meeting]:
        result = await self._session.execute(
            self._base_query()
            .where(Meeting.company_id == company_id)
            .where(Meeting.status == MeetingStatus.COMPLETED.value)
            .order_by(Meeting.scheduled_date.desc(), Meeting.created_at.desc())
        )
        return list(result.scalars().all())

    async def latest_completed_for_company(self, company_id: str) -> Meeting | None:
        result = await self._session.execute(
            self._base_query()
            .where(Meeting.company_id == company_id)
            .where(Meeting.status == MeetingStatus.COMPLETED.value)
            .order_by(Meeting.scheduled_date.desc(), Meeting.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()
