import pytest

from crm_api.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from crm_api.domain.enums import Tier, TierChangeReason
from crm_api.repositories.notification import NotificationRepository
from crm_api.services.tier import TierService, can_override
from tests.conftest import CLIENT_ID


@pytest.fixture
def tiers(session, clock):
    return TierService(session, CLIENT_ID, clock)


async def test_update_all_tiers_fixes_stale_tiers(session, tiers, make_company, ceo, clock):
    aging = await make_company(age_days=59, tier="TIER_2", name="Aging")
    await make_company(age_days=10, ad_spend="6000", tier="TIER_1", name="Spender")
    clock.advance(days=2)

    result = await tiers.update_all_tiers()

    assert result.total_companies == 2
    assert result.updated_count == 1
    (change,) = result.changes
    assert (change.company_id, change.old_tier, change.new_tier) == (aging.id, Tier.TIER_2, Tier.TIER_3)
    assert aging.tier == Tier.TIER_3.value

    history = await tiers.get_tier_history(aging.id)
    assert [(h.old_tier, h.new_tier, h.reason) for h in history] == [
        ("TIER_2", "TIER_3", TierChangeReason.AUTOMATIC.value)
    ]
    notes = await NotificationRepository(session, CLIENT_ID).list_all(filters={"user_id": ceo.id})
    assert len(notes) == 1 and "Tier 3" in notes[0].message

    assert (await tiers.update_all_tiers()).updated_count == 0


async def test_override_requires_admin(tiers, make_company, member):
    company = await make_company(age_days=10)
    assert not can_override(member)
    with pytest.raises(ForbiddenError):
        await tiers.override_tier(company.id, Tier.TIER_1, member)


async def test_override_logs_manual_change(tiers, make_company, ceo):
    company = await make_company(age_days=10)

    log = await tiers.override_tier(company.id, Tier.TIER_1, ceo, reason="Key account")

    assert log.reason == TierChangeReason.MANUAL_OVERRIDE.value
    assert log.changed_by == ceo.id
    assert log.notes == "Key account"
    assert company.tier == Tier.TIER_1.value


async def test_override_to_same_tier_conflicts(tiers, make_company, ceo):
    company = await make_company(age_days=10, tier="TIER_2")
    with pytest.raises(ConflictError):
        await tiers.override_tier(company.id, Tier.TIER_2, ceo)


async def test_override_is_reverted_by_bulk_recompute(tiers, make_company, ceo):
    company = await make_company(age_days=10)
    await tiers.override_tier(company.id, Tier.TIER_3, ceo)

    await tiers.update_all_tiers()

    assert company.tier == Tier.TIER_2.value


async def test_history_of_missing_company(tiers):
    with pytest.raises(NotFoundError):
        await tiers.get_tier_history("missing")


async def test_statistics_and_review(tiers, make_company):
    await make_company(age_days=10, tier="TIER_2", name="New")
    stale = await make_company(age_days=100, tier="TIER_2", name="Stale")
    await make_company(age_days=100, ad_spend="5000", tier="TIER_1", name="Big")

    stats = await tiers.get_tier_statistics()
    assert stats.distribution == {"TIER_1": 1, "TIER_2": 2, "TIER_3": 0}
    assert stats.total_companies == 3

    (review,) = await tiers.get_companies_needing_review()
    assert review.id == stale.id
    assert review.suggested_tier == Tier.TIER_3
