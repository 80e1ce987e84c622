"""Tier service: bulk recompute, manual overrides, change log, review queue.

Every tier change goes through :meth:`TierService.apply_tier_change`, which
updates the cached ``Company.tier`` and appends a ``TierChangeLog`` row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.company import Company
from crm_api.domain.enums import ADMIN_ROLES, NotificationType, Tier, TierChangeReason
from crm_api.domain.tier_change import TierChangeLog
from crm_api.domain.user import User
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.tier_change import TierChangeLogRepository
from crm_api.services.notification import NotificationService
from crm_api.services.tiering import classify_tier, tier_reason

logger = logging.getLogger(__name__)

TIER_LABELS: dict[Tier, str] = {
    Tier.TIER_1: "Tier 1 (High Ad Spend)",
    Tier.TIER_2: "Tier 2 (New Company)",
    Tier.TIER_3: "Tier 3 (Established, Low Ad Spend)",
}

RECENT_CHANGE_WINDOW = timedelta(days=7)


@dataclass
class TierChange:
    company_id: str
    company_name: str
    old_tier: Tier
    new_tier: Tier


@dataclass
class TierUpdateResult:
    total_companies: int
    updated_count: int
    changes: list[TierChange] = field(default_factory=list)


@dataclass
class TierStatistics:
    distribution: dict[str, int]
    recent_changes: int
    total_companies: int


@dataclass
class TierReview:
    id: str
    name: str
    tier: Tier
    suggested_tier: Tier
    reason: str


def can_override(user: User) -> bool:
    return user.role in {r.value for r in ADMIN_ROLES}


class TierService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._companies = CompanyRepository(session, client_id, clock)
        self._logs = TierChangeLogRepository(session, client_id, clock)
        self._notifications = NotificationService(session, client_id, clock)
        self._clock = clock

    async def _get_company(self, company_id: str) -> Company:
        company = await self._companies.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company", company_id)
        return company

    async def apply_tier_change(
        self,
        company: Company,
        new_tier: Tier,
        reason: TierChangeReason,
        changed_by: str | None = None,
        notes: str | None = None,
    ) -> TierChangeLog:
        old_tier = company.tier
        await self._companies.update(company.id, tier=new_tier.value)
        log = await self._logs.create(
            company_id=company.id,
            old_tier=old_tier,
            new_tier=new_tier.value,
            reason=reason.value,
            changed_by=changed_by,
            notes=notes,
        )
        logger.info(
            "Company %s tier %s -> %s (%s)", company.id, old_tier, new_tier.value, reason.value
        )
        return log

    async def _notify_owner(
        self, company: Company, old_tier: Tier, new_tier: Tier, message: str | None = None
    ) -> None:
        await self._notifications.create_notification(
            user_id=company.created_by,
            type=NotificationType.COMPANY_MILESTONE,
            title="Company Tier Updated",
            message=message
            or f"{company.name} has been moved from {TIER_LABELS[old_tier]} to {TIER_LABELS[new_tier]}",
            related_company_id=company.id,
        )

    async def update_all_tiers(self) -> TierUpdateResult:
        """Recompute every company's tier; log and notify on change."""
        now = self._clock()
        companies = await self._companies.list_all()
        result = TierUpdateResult(total_companies=len(companies), updated_count=0)

        for company in companies:
            new_tier = classify_tier(company.start_date, company.ad_spend, now)
            if new_tier.value == company.tier:
                continue
            old_tier = Tier(company.tier)
            await self.apply_tier_change(company, new_tier, TierChangeReason.AUTOMATIC)
            await self._notify_owner(company, old_tier, new_tier)
            result.changes.append(
                TierChange(
                    company_id=company.id,
                    company_name=company.name,
                    old_tier=old_tier,
                    new_tier=new_tier,
                )
            )
            result.updated_count += 1

        logger.info(
            "Tier update: %d of %d companies changed", result.updated_count, result.total_companies
        )
        return result

    async def override_tier(
        self, company_id: str, new_tier: Tier, acting_user: User, reason: str | None = None
    ) -> TierChangeLog:
        """Manually set a tier (CEO / manager only). Reverted by the next bulk recompute."""
        if not can_override(acting_user):
            raise ForbiddenError("Insufficient permissions to override tier")
        company = await self._get_company(company_id)
        if company.tier == new_tier.value:
            raise ConflictError("Company is already in the specified tier")

        old_tier = Tier(company.tier)
        log = await self.apply_tier_change(
            company, new_tier, TierChangeReason.MANUAL_OVERRIDE, acting_user.id, reason
        )
        if company.created_by != acting_user.id:
            await self._notify_owner(
                company, old_tier, new_tier,
                message=f"Tier manually updated by {acting_user.username}",
            )
        await self._notifications.create_notification(
            user_id=acting_user.id,
            type=NotificationType.COMPANY_MILESTONE,
            title="Tier Override Completed",
            message=f"Successfully updated {company.name} from {old_tier.value} to {new_tier.value}",
            related_company_id=company.id,
        )
        return log

    async def get_tier_history(self, company_id: str) -> list[TierChangeLog]:
        await self._get_company(company_id)
        return await self._logs.list_all(
            order_by="created_at", order="desc", filters={"company_id": company_id}
        )

    async def list_change_logs(
        self,
        pagination: PaginationParams,
        company_id: str | None = None,
        reason: TierChangeReason | None = None,
        changed_by: str | None = None,
    ):
        return await self._logs.search(
            offset=pagination.offset,
            limit=pagination.limit,
            filters={"company_id": company_id, "reason": reason, "changed_by": changed_by},
        )

    async def get_tier_statistics(self) -> TierStatistics:
        counts = await self._companies.tier_distribution()
        distribution = {tier.value: counts.get(tier.value, 0) for tier in Tier}
        recent = await self._logs.count_since(self._clock() - RECENT_CHANGE_WINDOW)
        return TierStatistics(
            distribution=distribution,
            recent_changes=recent,
            total_companies=sum(distribution.values()),
        )

    async def get_companies_needing_review(self) -> list[TierReview]:
        """Companies whose cached tier no longer matches the classifier."""
        now = self._clock()
        review: list[TierReview] = []
        for company in await self._companies.list_all():
            suggested = classify_tier(company.start_date, company.ad_spend, now)
            if suggested.value != company.tier:
                review.append(
                    TierReview(
                        id=company.id,
                        name=company.name,
                        tier=Tier(company.tier),
                        suggested_tier=suggested,
                        reason=tier_reason(suggested),
                    )
                )
        return review
