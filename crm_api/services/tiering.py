"""Company tiering and audit cadence rules.

Two independent classifications live here:

* **Tier** (sales bucket) from weekly ad spend and company age:
    1. ad spend >= threshold          -> TIER_1 (regardless of age)
    2. age < new-company window       -> TIER_2
    3. otherwise                      -> TIER_3
* **Audit cadence** from company age only:
    age < 3 months      -> weekly
    3..12 months        -> monthly
    > 12 months         -> quarterly

Months are calendar months (a company started on 15 June is 12 months old on
the following 15 June). Both functions are pure; ``now`` defaults to the current
UTC instant, so results change as companies age and callers must recompute.

Rule: No SQLAlchemy / no FastAPI here.
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from crm_api.core.clock import ensure_utc, utcnow
from crm_api.core.config import settings
from crm_api.domain.enums import Tier

NEW_COMPANY_MAX_AGE_MONTHS = 3
ESTABLISHED_COMPANY_MIN_AGE_MONTHS = 12


class AuditCadence(str, enum.Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"

    @property
    def days(self) -> int:
        return {
            AuditCadence.WEEKLY: settings.weekly_audit_days,
            AuditCadence.MONTHLY: settings.monthly_audit_days,
            AuditCadence.QUARTERLY: settings.quarterly_audit_days,
        }[self]


def company_age(start_date: datetime, now: datetime | None = None) -> timedelta:
    return ensure_utc(now or utcnow()) - ensure_utc(start_date)


def company_age_in_months(start_date: datetime, now: datetime | None = None) -> int:
    """Whole calendar months elapsed since ``start_date``."""
    age = relativedelta(ensure_utc(now or utcnow()), ensure_utc(start_date))
    return age.years * 12 + age.months


def classify_tier(
    start_date: datetime,
    ad_spend: float | Decimal,
    now: datetime | None = None,
) -> Tier:
    """Return the tier for a company; first matching rule wins."""
    if Decimal(str(ad_spend)) >= Decimal(str(settings.tier_1_ad_spend_threshold)):
        return Tier.TIER_1
    if company_age(start_date, now) < timedelta(days=settings.new_company_max_age_days):
        return Tier.TIER_2
    return Tier.TIER_3


def tier_reason(tier: Tier) -> str:
    """Human-readable explanation of why a company lands in ``tier``."""
    threshold = f"${settings.tier_1_ad_spend_threshold:,.0f}"
    if tier == Tier.TIER_1:
        return f"Weekly ad spend of {threshold} or more qualifies for Tier 1"
    if tier == Tier.TIER_2:
        return f"Company is still new (< {settings.new_company_max_age_days} days) with ad spend below {threshold}"
    return f"Company is established (>= {settings.new_company_max_age_days} days) with ad spend below {threshold}"


def audit_cadence(start_date: datetime, now: datetime | None = None) -> AuditCadence:
    """Audit frequency from company age (not from tier)."""
    start = ensure_utc(start_date)
    now = ensure_utc(now or utcnow())
    if now < start + relativedelta(months=NEW_COMPANY_MAX_AGE_MONTHS):
        return AuditCadence.WEEKLY
    if now <= start + relativedelta(months=ESTABLISHED_COMPANY_MIN_AGE_MONTHS):
        return AuditCadence.MONTHLY
    return AuditCadence.QUARTERLY


def next_audit_date(cadence: AuditCadence | int, from_date: datetime) -> datetime:
    """``from_date`` plus the cadence length in days."""
    days = cadence.days if isinstance(cadence, AuditCadence) else int(cadence)
    return ensure_utc(from_date) + timedelta(days=days)
