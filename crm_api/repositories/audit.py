"""Audit repository: date-window and outstanding-audit queries used by the scheduler."""

from datetime import datetime
from typing import Any

from sqlalchemy import select

from crm_api.domain.audit import Audit
from crm_api.domain.company import Company
from crm_api.domain.enums import OUTSTANDING_AUDIT_STATUSES, AuditStatus
from crm_api.repositories.base import BaseRepository

_OUTSTANDING = [s.value for s in OUTSTANDING_AUDIT_STATUSES]


class AuditRepository(BaseRepository[Audit]):
    model = Audit

    def _with_live_company(self):
        """SELECT (Audit, Company) for audits whose company still exists."""
        return (
            select(Audit, Company)
            .join(Company, Company.id == Audit.company_id)
            .where(Audit.client_id == self._client_id)
            .where(Audit.deleted_at.is_(None))
            .where(Company.deleted_at.is_(None))
        )

    def _filtered(self, filters: dict[str, Any] | None, date_from: datetime | None, date_to: datetime | None):
        q = self._apply_filters(self._base_query(), filters)
        if date_from is not None:
            q = q.where(Audit.scheduled_date >= date_from)
        if date_to is not None:
            q = q.where(Audit.scheduled_date <= date_to)
        live_companies = select(Company.id).where(Company.deleted_at.is_(None))
        return q.where(Audit.company_id.in_(live_companies))

    async def search(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "scheduled_date",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> tuple[list[Audit], int]:
        q = self._filtered(filters, date_from, date_to)
        return await self._paginate(q, offset=offset, limit=limit, order_by=order_by, order=order)

    async def get_with_company(self, audit_id: str) -> tuple[Audit, Company] | None:
        result = await self._session.execute(self._with_live_company().where(Audit.id == audit_id))
        row = result.first()
        return (row[0], row[1]) if row else None

    async def list_outstanding_for_company(self, company_id: str) -> list[Audit]:
        result = await self._session.execute(
            self._base_query()
            .where(Audit.company_id == company_id)
            .where(Audit.status.in_(_OUTSTANDING))
            .order_by(Audit.scheduled_date.asc())
        )
        return list(result.scalars().all())

    async def list_outstanding_by_company(self) -> dict[str, list[Audit]]:
        """All outstanding audits grouped by company id (one query for bulk jobs)."""
        result = await self._session.execute(
            self._base_query()
            .where(Audit.status.in_(_OUTSTANDING))
            .order_by(Audit.scheduled_date.asc())
        )
        grouped: dict[str, list[Audit]] = {}
        for audit in result.scalars().all():
            grouped.setdefault(audit.company_id, []).append(audit)
        return grouped

    async def list_past_due(self, now: datetime) -> list[Audit]:
        """SCHEDULED audits whose date is strictly before ``now``, oldest first."""
        result = await self._session.execute(
            self._base_query()
            .where(Audit.status == AuditStatus.SCHEDULED.value)
            .where(Audit.scheduled_date < now)
            .order_by(Audit.scheduled_date.asc())
        )
        return list(result.scalars().all())

    async def list_in_window(
        self, start: datetime, end: datetime, status: AuditStatus = AuditStatus.SCHEDULED
    ) -> list[tuple[Audit, Company]]:
        result = await self._session.execute(
            self._with_live_company()
            .where(Audit.status == status.value)
            .where(Audit.scheduled_date >= start)
            .where(Audit.scheduled_date <= end)
            .order_by(Audit.scheduled_date.asc())
        )
        return [(a, c) for a, c in result.all()]

    async def list_with_status(self, status: AuditStatus) -> list[tuple[Audit, Company]]:
        result = await self._session.execute(
            self._with_live_company()
            .where(Audit.status == status.value)
            .order_by(Audit.scheduled_date.asc())
        )
        return [(a, c) for a, c in result.all()]

    async def count_in_window(
        self, start: datetime, end: datetime, status: AuditStatus = AuditStatus.SCHEDULED
    ) -> int:
        q = (
            self._base_query()
            .where(Audit.status == status.value)
            .where(Audit.scheduled_date >= start)
            .where(Audit.scheduled_date <= end)
        )
        return await self._count(q)
