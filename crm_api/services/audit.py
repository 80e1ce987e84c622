"""Audit CRUD and listing service.

Scheduling rules (cadence, successors, overdue sweep) live in
:mod:`crm_api.services.audit_scheduler`; this module covers manual audit
management and the read views the dashboard uses.
"""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.config import settings
from crm_api.core.exceptions import NotFoundError, ValidationError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.audit import Audit
from crm_api.domain.company import Company
from crm_api.domain.enums import AuditStatus
from crm_api.repositories.audit import AuditRepository
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.user import UserRepository
from crm_api.schemas.audit import AuditCreate, AuditFilters, AuditUpdate


class AuditService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._repo = AuditRepository(session, client_id, clock)
        self._companies = CompanyRepository(session, client_id, clock)
        self._users = UserRepository(session, client_id, clock)
        self._clock = clock

    async def _ensure_company(self, company_id: str) -> Company:
        company = await self._companies.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company", company_id)
        return company

    async def _ensure_user(self, user_id: str) -> None:
        if not await self._users.get_by_id(user_id):
            raise NotFoundError("User", user_id)

    async def create_audit(self, data: AuditCreate) -> Audit:
        await self._ensure_company(data.company_id)
        await self._ensure_user(data.assigned_to)
        return await self._repo.create(
            company_id=data.company_id,
            scheduled_date=data.scheduled_date,
            assigned_to=data.assigned_to,
            status=AuditStatus.SCHEDULED.value,
            notes=data.notes,
        )

    async def list_audits(self, pagination: PaginationParams, filters: AuditFilters):
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise ValidationError("dateFrom must not be after dateTo")
        sort = pagination.sort if pagination.sort != "created_at" else "scheduled_date"
        return await self._repo.search(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=sort,
            order=pagination.order,
            filters={
                "company_id": filters.company_id,
                "assigned_to": filters.assigned_to,
                "status": filters.status,
            },
            date_from=filters.date_from,
            date_to=filters.date_to,
        )

    async def get_audit(self, audit_id: str) -> tuple[Audit, Company]:
        row = await self._repo.get_with_company(audit_id)
        if not row:
            raise NotFoundError("Audit", audit_id)
        return row

    async def update_audit(self, audit_id: str, data: AuditUpdate) -> Audit:
        await self.get_audit(audit_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "assigned_to" in changes:
            await self._ensure_user(changes["assigned_to"])
        if "status" in changes:
            changes["status"] = AuditStatus(changes["status"]).value
            if changes["status"] == AuditStatus.COMPLETED.value:
                changes.setdefault("completed_date", self._clock())
        if "scheduled_date" in changes:
            # A manual date no longer follows the automatic cadence.
            changes["cadence_days"] = None
        updated = await self._repo.update(audit_id, **changes)
        return updated  # type: ignore[return-value]

    async def delete_audit(self, audit_id: str) -> None:
        deleted = await self._repo.soft_delete(audit_id)
        if not deleted:
            raise NotFoundError("Audit", audit_id)

    async def list_company_audits(self, company_id: str) -> list[Audit]:
        await self._ensure_company(company_id)
        return await self._repo.list_all(
            order_by="scheduled_date", order="desc", filters={"company_id": company_id}
        )

    async def list_upcoming(self, days: int | None = None) -> list[tuple[Audit, Company]]:
        now = self._clock()
        window = days if days is not None else settings.upcoming_audit_window_days
        return await self._repo.list_in_window(now, now + timedelta(days=window))

    async def list_overdue(self) -> list[tuple[Audit, Company]]:
        return await self._repo.list_with_status(AuditStatus.OVERDUE)
