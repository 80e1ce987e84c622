from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from crm_api.core.exceptions import ForbiddenError, NotFoundError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.audit import Audit
from crm_api.domain.company import Company
from crm_api.domain.enums import AuditStatus, Tier
from crm_api.repositories.audit import AuditRepository
from crm_api.repositories.note import NoteRepository
from crm_api.repositories.payment import PaymentRepository
from crm_api.repositories.tier_change import TierChangeLogRepository
from crm_api.schemas.company import CompanyCreate, CompanyUpdate, MeetingUpdate
from crm_api.schemas.note import NoteCreate
from crm_api.schemas.payment import PaymentCreate
from crm_api.services.company import CompanyService
from crm_api.services.note import NoteService
from crm_api.services.payment import PaymentService
from tests.conftest import CLIENT_ID, NOW


@pytest.fixture
def companies(session, clock):
    return CompanyService(session, CLIENT_ID, clock)


def _create(age_days: int, ad_spend: str = "0", name: str = "Acme") -> CompanyCreate:
    return CompanyCreate(
        name=name,
        email="owner@acme.com",
        phone_number="555-0100",
        start_date=NOW - timedelta(days=age_days),
        ad_spend=Decimal(ad_spend),
    )


def _pagination(**overrides) -> PaginationParams:
    params = {"page": 1, "limit": 20, "sort": "createdAt", "order": "desc", **overrides}
    return PaginationParams(**params)


async def test_create_classifies_and_schedules_first_audit(session, companies, ceo):
    company = await companies.create_company(_create(age_days=10, ad_spend="1000"), ceo)

    assert company.tier == Tier.TIER_2.value
    assert company.created_by == ceo.id
    (audit,) = await AuditRepository(session, CLIENT_ID).list_outstanding_for_company(company.id)
    assert audit.status == AuditStatus.SCHEDULED.value
    assert audit.scheduled_date == NOW + timedelta(days=7)
    assert audit.assigned_to == ceo.id


async def test_update_recomputes_tier(session, companies, ceo):
    company = await companies.create_company(_create(age_days=100, ad_spend="100"), ceo)
    assert company.tier == Tier.TIER_3.value

    updated = await companies.update_company(company.id, CompanyUpdate(ad_spend=Decimal("5000")))

    assert updated.tier == Tier.TIER_1.value
    logs = await TierChangeLogRepository(session, CLIENT_ID).list_all(filters={"company_id": company.id})
    assert [(log.old_tier, log.new_tier) for log in logs] == [("TIER_3", "TIER_1")]


async def test_update_without_tier_change_writes_no_log(session, companies, ceo):
    company = await companies.create_company(_create(age_days=100), ceo)
    await companies.update_company(company.id, CompanyUpdate(name="Renamed"))
    assert await TierChangeLogRepository(session, CLIENT_ID).count() == 0


async def test_record_meeting(companies, ceo):
    company = await companies.create_company(_create(age_days=5), ceo)
    meeting = MeetingUpdate(meeting_date=NOW, attendees=["ceo", "client"], duration=45)

    updated = await companies.record_meeting(company.id, meeting)

    assert updated.last_meeting_date == NOW
    assert updated.last_meeting_attendees == ["ceo", "client"]
    assert updated.last_meeting_duration == 45


async def test_list_filters_by_tier_and_name(companies, ceo):
    await companies.create_company(_create(age_days=5, name="Fresh Co"), ceo)
    await companies.create_company(_create(age_days=500, name="Old Co"), ceo)
    await companies.create_company(_create(age_days=500, ad_spend="9000", name="Rich Co"), ceo)

    items, total = await companies.list_companies(_pagination(), tier=Tier.TIER_3)
    assert total == 1 and items[0].name == "Old Co"

    items, total = await companies.list_companies(_pagination(), search="co")
    assert total == 3


async def test_delete_cascades_to_dependents(session, companies, ceo, clock):
    company = await companies.create_company(_create(age_days=30), ceo)
    await NoteService(session, CLIENT_ID).create_note(company.id, NoteCreate(content="hello"), ceo)
    await PaymentService(session, CLIENT_ID).record_payment(
        PaymentCreate(company_id=company.id, amount=Decimal("250"), payment_date=NOW), ceo
    )

    await companies.delete_company(company.id, ceo)

    with pytest.raises(NotFoundError):
        await companies.get_company(company.id)
    assert await AuditRepository(session, CLIENT_ID).count({"company_id": company.id}) == 0
    assert await NoteRepository(session, CLIENT_ID).count({"company_id": company.id}) == 0
    assert await PaymentRepository(session, CLIENT_ID).count({"company_id": company.id}) == 0


async def test_delete_requires_owner_or_admin(companies, ceo, member):
    company = await companies.create_company(_create(age_days=30), ceo)
    with pytest.raises(ForbiddenError):
        await companies.delete_company(company.id, member)


async def test_payments_keep_company_last_payment_current(session, companies, ceo):
    company = await companies.create_company(_create(age_days=30), ceo)
    payments = PaymentService(session, CLIENT_ID)

    older = await payments.record_payment(
        PaymentCreate(company_id=company.id, amount=Decimal("100"), payment_date=NOW - timedelta(days=3)), ceo
    )
    newer = await payments.record_payment(
        PaymentCreate(company_id=company.id, amount=Decimal("300"), payment_date=NOW), ceo
    )
    assert company.last_payment_amount == Decimal("300")

    await payments.delete_payment(newer.id)
    assert company.last_payment_amount == Decimal("100")
    assert company.last_payment_date == older.payment_date


async def test_writes_are_stamped_with_the_injected_clock(session, companies, ceo, clock):
    company = await companies.create_company(_create(age_days=30), ceo)
    assert company.created_at == NOW
    (audit,) = await AuditRepository(session, CLIENT_ID).list_outstanding_for_company(company.id)
    assert audit.created_at == NOW

    clock.advance(days=2)
    updated = await companies.update_company(company.id, CompanyUpdate(name="Acme Ltd"))
    assert updated.updated_at == clock.now

    clock.advance(days=1)
    await companies.delete_company(company.id, ceo)

    deleted_at = (
        await session.execute(select(Company.deleted_at).where(Company.id == company.id))
    ).scalar_one()
    assert deleted_at == clock.now
    audit_deleted_at = (
        await session.execute(select(Audit.deleted_at).where(Audit.id == audit.id))
    ).scalar_one()
    assert audit_deleted_at == clock.now
