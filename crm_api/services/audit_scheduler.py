"""Audit scheduler: initial scheduling, completion chaining, overdue sweep, bulk reschedule.

Cadence is always derived from company age (see :mod:`crm_api.services.tiering`),
never from the ad-spend tier. Every audit created here records the cadence that
produced its date in ``cadence_days`` so the bulk reschedule can detect a
cadence change without drifting dates on repeated runs.

Rule: No FastAPI here. Storage errors propagate to the caller unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.config import settings
from crm_api.core.exceptions import ConflictError, NotFoundError, ValidationError
from crm_api.domain.audit import Audit
from crm_api.domain.company import Company
from crm_api.domain.enums import AuditStatus, UserRole
from crm_api.domain.user import User
from crm_api.repositories.audit import AuditRepository
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.user import UserRepository
from crm_api.services.tiering import audit_cadence, next_audit_date

logger = logging.getLogger(__name__)


@dataclass
class OverdueSweepResult:
    marked_count: int
    audits: list[Audit] = field(default_factory=list)


@dataclass
class ScheduleUpdateResult:
    updated: int = 0
    created: int = 0
    skipped: int = 0  # companies with no possible assignee


@dataclass
class AuditStatistics:
    total: int
    completed: int
    scheduled: int
    overdue: int
    upcoming_week: int


class AuditSchedulerService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._audits = AuditRepository(session, client_id, clock)
        self._companies = CompanyRepository(session, client_id, clock)
        self._users = UserRepository(session, client_id, clock)
        self._clock = clock

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _get_company(self, company_id: str) -> Company:
        company = await self._companies.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company", company_id)
        return company

    async def _require_user(self, user_id: str | None) -> User:
        if not user_id or not user_id.strip():
            raise ValidationError("assignedTo is required")
        user = await self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def _find_assignee(self, preferred_user_id: str | None) -> str | None:
        """Preferred user, else the first CEO, else the first manager, else anyone."""
        if preferred_user_id and await self._users.get_by_id(preferred_user_id):
            return preferred_user_id
        for role in (UserRole.CEO, UserRole.MANAGER):
            user = await self._users.first_with_role(role)
            if user:
                return user.id
        user = await self._users.first()
        return user.id if user else None

    async def _create_next(
        self, company: Company, assigned_to: str, now: datetime, notes: str | None
    ) -> Audit:
        cadence = audit_cadence(company.start_date, now)
        return await self._audits.create(
            company_id=company.id,
            scheduled_date=next_audit_date(cadence, now),
            assigned_to=assigned_to,
            status=AuditStatus.SCHEDULED.value,
            cadence_days=cadence.days,
            notes=notes,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def schedule_initial_audit(self, company_id: str, assigned_to: str) -> Audit:
        """Create one SCHEDULED audit at now + cadence.

        Does not check for an existing outstanding audit; use
        :meth:`schedule_initial_audit_if_missing` when duplicates matter.
        """
        company = await self._get_company(company_id)
        await self._require_user(assigned_to)
        now = self._clock()
        audit = await self._create_next(
            company, assigned_to, now, notes="Initial audit scheduled from company age"
        )
        logger.info(
            "Scheduled initial audit %s for company %s on %s",
            audit.id, company.id, audit.scheduled_date.date().isoformat(),
        )
        return audit

    async def schedule_initial_audit_if_missing(self, company_id: str, assigned_to: str) -> Audit:
        """Return the company's outstanding audit, scheduling one only if none exists."""
        company = await self._get_company(company_id)
        existing = await self._audits.list_outstanding_for_company(company.id)
        if existing:
            return existing[0]
        return await self.schedule_initial_audit(company.id, assigned_to)

    async def complete_audit(self, audit_id: str, notes: str | None = None) -> Audit:
        """Mark an audit completed and chain its successor from the company's current cadence."""
        audit = await self._audits.get_by_id(audit_id)
        if not audit:
            raise NotFoundError("Audit", audit_id)
        if audit.status == AuditStatus.COMPLETED.value:
            raise ConflictError(f"Audit '{audit_id}' is already completed")
        company = await self._get_company(audit.company_id)

        now = self._clock()
        changes: dict = {"status": AuditStatus.COMPLETED.value, "completed_date": now}
        if notes is not None:
            changes["notes"] = notes
        completed = await self._audits.update(audit.id, **changes)

        others = [
            a for a in await self._audits.list_outstanding_for_company(company.id)
            if a.id != audit.id
        ]
        if others:
            logger.info(
                "Company %s already has outstanding audit %s; no successor created",
                company.id, others[0].id,
            )
        else:
            successor = await self._create_next(
                company, audit.assigned_to, now,
                notes="Automatically scheduled after previous audit completion",
            )
            logger.info(
                "Audit %s completed; next audit %s on %s",
                audit.id, successor.id, successor.scheduled_date.date().isoformat(),
            )
        return completed  # type: ignore[return-value]

    async def process_overdue_audits(self) -> OverdueSweepResult:
        """Flip every SCHEDULED audit dated before now to OVERDUE."""
        now = self._clock()
        past_due = await self._audits.list_past_due(now)
        for audit in past_due:
            audit.status = AuditStatus.OVERDUE.value
            audit.updated_at = now
        await self._audits.session.flush()
        if past_due:
            logger.info("Marked %d audit(s) overdue", len(past_due))
        return OverdueSweepResult(marked_count=len(past_due), audits=past_due)

    async def update_all_schedules(self) -> ScheduleUpdateResult:
        """Make sure every company has exactly one outstanding audit on its current cadence."""
        now = self._clock()
        result = ScheduleUpdateResult()
        outstanding = await self._audits.list_outstanding_by_company()

        for company in await self._companies.list_all():
            existing = outstanding.get(company.id, [])
            cadence = audit_cadence(company.start_date, now)

            if not existing:
                assignee = await self._find_assignee(company.created_by)
                if assignee is None:
                    logger.warning("No assignee available for company %s; skipping", company.id)
                    result.skipped += 1
                    continue
                await self._create_next(
                    company, assignee, now, notes="Automatically scheduled from company age"
                )
                result.created += 1
                continue

            nxt = existing[0]
            if (
                nxt.status == AuditStatus.SCHEDULED.value
                and nxt.cadence_days is not None
                and nxt.cadence_days != cadence.days
            ):
                anchor = nxt.scheduled_date - timedelta(days=nxt.cadence_days)
                nxt.scheduled_date = next_audit_date(cadence, anchor)
                nxt.cadence_days = cadence.days
                nxt.updated_at = now
                result.updated += 1

        await self._audits.session.flush()
        logger.info(
            "Audit schedule update: %d updated, %d created, %d skipped",
            result.updated, result.created, result.skipped,
        )
        return result

    async def get_statistics(self) -> AuditStatistics:
        now = self._clock()
        window = timedelta(days=settings.upcoming_audit_window_days)
        return AuditStatistics(
            total=await self._audits.count(),
            completed=await self._audits.count({"status": AuditStatus.COMPLETED}),
            scheduled=await self._audits.count({"status": AuditStatus.SCHEDULED}),
            overdue=await self._audits.count({"status": AuditStatus.OVERDUE}),
            upcoming_week=await self._audits.count_in_window(now, now + window),
        )
