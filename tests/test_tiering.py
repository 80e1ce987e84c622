from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta

from crm_api.domain.enums import Tier
from crm_api.services.tiering import (
    AuditCadence,
    audit_cadence,
    classify_tier,
    company_age_in_months,
    next_audit_date,
    tier_reason,
)
from tests.conftest import NOW


def _started(days: int):
    return NOW - timedelta(days=days)


class TestClassifyTier:
    def test_high_spend_is_tier_1_regardless_of_age(self):
        assert classify_tier(_started(10), Decimal("5000"), NOW) == Tier.TIER_1
        assert classify_tier(_started(1000), 7500, NOW) == Tier.TIER_1

    def test_threshold_is_inclusive(self):
        assert classify_tier(_started(365), Decimal("5000.00"), NOW) == Tier.TIER_1
        assert classify_tier(_started(365), Decimal("4999.99"), NOW) == Tier.TIER_3

    def test_new_low_spend_is_tier_2(self):
        assert classify_tier(_started(59), 0, NOW) == Tier.TIER_2

    def test_sixty_days_is_no_longer_new(self):
        assert classify_tier(_started(60), 0, NOW) == Tier.TIER_3

    def test_naive_start_date_treated_as_utc(self):
        naive = _started(30).replace(tzinfo=None)
        assert classify_tier(naive, 100, NOW) == Tier.TIER_2


class TestAuditCadence:
    @pytest.mark.parametrize(
        "age_days, expected",
        [
            (0, AuditCadence.WEEKLY),
            (85, AuditCadence.WEEKLY),
            (95, AuditCadence.MONTHLY),
            (364, AuditCadence.MONTHLY),
            (367, AuditCadence.QUARTERLY),
            (2000, AuditCadence.QUARTERLY),
        ],
    )
    def test_cadence_follows_age(self, age_days, expected):
        assert audit_cadence(_started(age_days), NOW) == expected

    def test_cadence_ignores_ad_spend(self):
        # A brand-new TIER_1 company is still audited weekly.
        start = _started(5)
        assert classify_tier(start, 10000, NOW) == Tier.TIER_1
        assert audit_cadence(start, NOW) == AuditCadence.WEEKLY

    def test_cadence_days(self):
        assert [c.days for c in AuditCadence] == [7, 30, 90]

    def test_age_in_months_counts_calendar_months(self):
        assert company_age_in_months(datetime(2024, 1, 31, tzinfo=timezone.utc), NOW) == 4
        assert company_age_in_months(NOW - relativedelta(years=1), NOW) == 12

    def test_three_months_to_the_day_is_monthly(self):
        assert audit_cadence(NOW - relativedelta(months=3), NOW) == AuditCadence.MONTHLY
        assert audit_cadence(NOW - relativedelta(months=3) + timedelta(seconds=1), NOW) == AuditCadence.WEEKLY

    def test_first_year_is_monthly_even_past_360_days(self):
        # 363 days old: still inside its first year
        assert audit_cadence(datetime(2023, 6, 18, tzinfo=timezone.utc), NOW) == AuditCadence.MONTHLY
        assert audit_cadence(NOW - relativedelta(years=1), NOW) == AuditCadence.MONTHLY

    def test_one_year_and_a_day_is_quarterly(self):
        start = NOW - relativedelta(years=1, days=1)
        assert audit_cadence(start, NOW) == AuditCadence.QUARTERLY


def test_next_audit_date_adds_cadence_days():
    assert next_audit_date(AuditCadence.MONTHLY, NOW) == NOW + timedelta(days=30)
    assert next_audit_date(14, NOW) == NOW + timedelta(days=14)


def test_tier_reason_mentions_threshold():
    assert "$5,000" in tier_reason(Tier.TIER_1)
    assert "new" in tier_reason(Tier.TIER_2)


def test_old_company_with_high_spend_is_tier_1():
    start = datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert classify_tier(start, 8000, NOW) == Tier.TIER_1
    assert audit_cadence(start, NOW) == AuditCadence.QUARTERLY


def test_established_low_spend_is_tier_3_with_monthly_audits():
    start = _started(200)
    assert classify_tier(start, 500, NOW) == Tier.TIER_3
    assert audit_cadence(start, NOW) == AuditCadence.MONTHLY
