"""Company service: lifecycle of companies and their dependent records.

Create classifies the tier and schedules the first audit; update keeps the
cached tier in step with start date / ad spend; delete cascades to audits,
notes, payments and meetings. All of it runs in the caller's session, so a
failure at any step rolls back the whole request.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.exceptions import ForbiddenError, NotFoundError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.company import Company
from crm_api.domain.enums import Tier, TierChangeReason
from crm_api.domain.user import User
from crm_api.repositories.audit import AuditRepository
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.meeting import MeetingRepository
from crm_api.repositories.note import NoteRepository
from crm_api.repositories.payment import PaymentRepository
from crm_api.schemas.company import CompanyCreate, CompanyUpdate, MeetingUpdate
from crm_api.services.audit_scheduler import AuditSchedulerService
from crm_api.services.tier import TierService, can_override
from crm_api.services.tiering import classify_tier

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._repo = CompanyRepository(session, client_id, clock)
        self._audits = AuditRepository(session, client_id, clock)
        self._notes = NoteRepository(session, client_id, clock)
        self._payments = PaymentRepository(session, client_id, clock)
        self._meetings = MeetingRepository(session, client_id, clock)
        self._scheduler = AuditSchedulerService(session, client_id, clock)
        self._tiers = TierService(session, client_id, clock)
        self._clock = clock

    async def list_companies(
        self,
        pagination: PaginationParams,
        tier: Tier | None = None,
        search: str | None = None,
        created_by: str | None = None,
    ):
        return await self._repo.search(
            query=search,
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"tier": tier, "created_by": created_by},
        )

    async def get_company(self, company_id: str) -> Company:
        company = await self._repo.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company", company_id)
        return company

    async def create_company(self, data: CompanyCreate, creator: User) -> Company:
        tier = classify_tier(data.start_date, data.ad_spend, self._clock())
        company = await self._repo.create(
            **data.model_dump(exclude_none=True),
            tier=tier.value,
            created_by=creator.id,
            last_meeting_attendees=[],
        )
        audit = await self._scheduler.schedule_initial_audit_if_missing(company.id, creator.id)
        logger.info(
            "Created company %s (%s); first audit %s", company.id, tier.value, audit.id
        )
        return company

    async def update_company(self, company_id: str, data: CompanyUpdate) -> Company:
        company = await self.get_company(company_id)
        changes = data.model_dump(exclude_none=True, exclude_unset=True)
        if changes:
            company = await self._repo.update(company_id, **changes)  # type: ignore[assignment]

        new_tier = classify_tier(company.start_date, company.ad_spend, self._clock())
        if new_tier.value != company.tier:
            await self._tiers.apply_tier_change(company, new_tier, TierChangeReason.AUTOMATIC)
        return company

    async def record_meeting(self, company_id: str, data: MeetingUpdate) -> Company:
        await self.get_company(company_id)
        updated = await self._repo.update(
            company_id,
            last_meeting_date=data.meeting_date,
            last_meeting_attendees=list(data.attendees),
            last_meeting_duration=data.duration,
        )
        return updated  # type: ignore[return-value]

    async def delete_company(self, company_id: str, acting_user: User) -> None:
        """Soft-delete the company and everything hanging off it, in one transaction."""
        company = await self.get_company(company_id)
        if company.created_by != acting_user.id and not can_override(acting_user):
            raise ForbiddenError("You do not have permission to delete this company")

        audits = await self._audits.soft_delete_where(company_id=company.id)
        notes = await self._notes.soft_delete_where(company_id=company.id)
        payments = await self._payments.soft_delete_where(company_id=company.id)
        meetings = await self._meetings.soft_delete_where(company_id=company.id)
        await self._repo.soft_delete(company.id)
        logger.info(
            "Deleted company %s with %d audit(s), %d note(s), %d payment(s), %d meeting(s)",
            company.id, audits, notes, payments, meetings,
        )
