from datetime import timedelta

import pytest

from crm_api.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.enums import MeetingStatus, RsvpResponse
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.meeting import MeetingRepository
from crm_api.schemas.meeting import MeetingCreate, MeetingEdit, MeetingFilters
from crm_api.services.company import CompanyService
from crm_api.services.meeting import MeetingService, rsvp_status
from tests.conftest import CLIENT_ID, NOW


@pytest.fixture
def meetings(session, clock):
    return MeetingService(session, CLIENT_ID, clock)


def _meeting(company_id: str, days_ahead: float = 2, duration: int = 45, attendees=None) -> MeetingCreate:
    return MeetingCreate(
        company_id=company_id,
        scheduled_date=NOW + timedelta(days=days_ahead),
        duration=duration,
        attendees=attendees or ["ceo", "owner@acme.com"],
        notes="Quarterly review agenda",
    )


def _pagination(**overrides) -> PaginationParams:
    params = {"page": 1, "limit": 20, "sort": "scheduledDate", "order": "asc", **overrides}
    return PaginationParams(**params)


async def test_create_meeting(meetings, make_company, ceo):
    company = await make_company(age_days=30)

    meeting = await meetings.create_meeting(_meeting(company.id), ceo)

    assert meeting.status == MeetingStatus.SCHEDULED.value
    assert meeting.created_by == ceo.id
    assert meeting.scheduled_date == NOW + timedelta(days=2)
    assert meeting.attendees == ["ceo", "owner@acme.com"]
    assert meeting.rsvp_responses == {}


async def test_create_meeting_in_the_past_rejected(meetings, make_company, ceo):
    company = await make_company(age_days=30)
    with pytest.raises(ValidationError):
        await meetings.create_meeting(_meeting(company.id, days_ahead=0), ceo)


async def test_create_meeting_for_unknown_company(meetings, ceo):
    with pytest.raises(NotFoundError):
        await meetings.create_meeting(_meeting("missing"), ceo)


async def test_list_meetings_filters_by_company_and_date(meetings, make_company, ceo):
    acme = await make_company(age_days=30)
    other = await make_company(age_days=30, name="Globex")
    first = await meetings.create_meeting(_meeting(acme.id, days_ahead=1), ceo)
    await meetings.create_meeting(_meeting(acme.id, days_ahead=20), ceo)
    await meetings.create_meeting(_meeting(other.id, days_ahead=1), ceo)

    items, total = await meetings.list_meetings(
        _pagination(),
        MeetingFilters(company_id=acme.id, date_to=NOW + timedelta(days=7)),
    )

    assert total == 1
    assert [m.id for m in items] == [first.id]


async def test_list_meetings_rejects_inverted_range(meetings):
    with pytest.raises(ValidationError):
        await meetings.list_meetings(
            _pagination(), MeetingFilters(date_from=NOW, date_to=NOW - timedelta(days=1))
        )


async def test_upcoming_uses_window_and_skips_completed(meetings, make_company, ceo):
    company = await make_company(age_days=30)
    soon = await meetings.create_meeting(_meeting(company.id, days_ahead=3), ceo)
    await meetings.create_meeting(_meeting(company.id, days_ahead=10), ceo)
    done = await meetings.create_meeting(_meeting(company.id, days_ahead=1), ceo)
    await meetings.add_meeting_notes(done.id, "Went fine")

    rows = await meetings.list_upcoming()

    assert [(m.id, c.name) for m, c in rows] == [(soon.id, "Acme")]
    assert len(await meetings.list_upcoming(days=14)) == 2


async def test_get_meeting_returns_company(meetings, make_company, ceo):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id), ceo)

    meeting, owner = await meetings.get_meeting(created.id)

    assert meeting.id == created.id
    assert owner.id == company.id

    with pytest.raises(NotFoundError):
        await meetings.get_meeting("missing")


async def test_update_meeting(meetings, make_company, ceo):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id), ceo)

    updated = await meetings.update_meeting(
        created.id, MeetingEdit(duration=90, attendees=["ceo"]), ceo
    )

    assert updated.duration == 90
    assert updated.attendees == ["ceo"]
    assert updated.scheduled_date == created.scheduled_date

    with pytest.raises(ValidationError):
        await meetings.update_meeting(created.id, MeetingEdit(scheduled_date=NOW), ceo)


async def test_only_creator_or_admin_may_modify(meetings, make_company, ceo, member):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id), ceo)

    with pytest.raises(ForbiddenError):
        await meetings.update_meeting(created.id, MeetingEdit(duration=10), member)
    with pytest.raises(ForbiddenError):
        await meetings.delete_meeting(created.id, member)

    own = await meetings.create_meeting(_meeting(company.id), member)
    updated = await meetings.update_meeting(own.id, MeetingEdit(duration=10), member)
    assert updated.duration == 10


@pytest.mark.parametrize(
    "responses, expected",
    [
        ({}, MeetingStatus.SCHEDULED),
        ({"a": "NOT_GOING"}, MeetingStatus.SCHEDULED),
        ({"a": "NOT_GOING", "b": "GOING"}, MeetingStatus.CONFIRMED),
    ],
)
def test_rsvp_status(responses, expected):
    assert rsvp_status(responses) is expected


async def test_rsvp_confirms_and_reverts(meetings, make_company, ceo, member):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id), ceo)

    going = await meetings.update_rsvp(created.id, member, RsvpResponse.GOING)
    assert going.status == MeetingStatus.CONFIRMED.value
    assert going.rsvp_responses == {member.id: "GOING"}

    declined = await meetings.update_rsvp(created.id, member, RsvpResponse.NOT_GOING)
    assert declined.status == MeetingStatus.SCHEDULED.value
    assert declined.rsvp_responses == {member.id: "NOT_GOING"}

    both = await meetings.update_rsvp(created.id, ceo, RsvpResponse.GOING)
    assert both.status == MeetingStatus.CONFIRMED.value
    assert both.rsvp_responses == {member.id: "NOT_GOING", ceo.id: "GOING"}


async def test_rsvp_keeps_completed_status(meetings, make_company, ceo, member):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id), ceo)
    await meetings.add_meeting_notes(created.id, "Done")

    meeting = await meetings.update_rsvp(created.id, member, RsvpResponse.NOT_GOING)

    assert meeting.status == MeetingStatus.COMPLETED.value


async def test_notes_complete_meeting_and_update_company(session, meetings, make_company, ceo):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id, duration=30, attendees=["ceo"]), ceo)

    meeting = await meetings.add_meeting_notes(created.id, "Agreed on new budget")

    assert meeting.status == MeetingStatus.COMPLETED.value
    assert meeting.meeting_notes == "Agreed on new budget"
    refreshed = await CompanyRepository(session, CLIENT_ID).get_by_id(company.id)
    assert refreshed.last_meeting_date == NOW + timedelta(days=2)
    assert refreshed.last_meeting_attendees == ["ceo"]
    assert refreshed.last_meeting_duration == 30


async def test_company_tracks_latest_completed_meeting(session, meetings, make_company, ceo):
    company = await make_company(age_days=30)
    early = await meetings.create_meeting(_meeting(company.id, days_ahead=1, duration=15), ceo)
    late = await meetings.create_meeting(_meeting(company.id, days_ahead=5, duration=60), ceo)
    await meetings.add_meeting_notes(late.id, "Second")
    await meetings.add_meeting_notes(early.id, "First")

    companies = CompanyRepository(session, CLIENT_ID)
    assert (await companies.get_by_id(company.id)).last_meeting_duration == 60

    await meetings.delete_meeting(late.id, ceo)
    refreshed = await companies.get_by_id(company.id)
    assert refreshed.last_meeting_date == NOW + timedelta(days=1)
    assert refreshed.last_meeting_duration == 15

    await meetings.delete_meeting(early.id, ceo)
    cleared = await companies.get_by_id(company.id)
    assert cleared.last_meeting_date is None
    assert cleared.last_meeting_attendees == []
    assert cleared.last_meeting_duration is None


async def test_editing_completed_meeting_resyncs_company(session, meetings, make_company, ceo):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id, duration=30), ceo)
    await meetings.add_meeting_notes(created.id, "Done")

    await meetings.update_meeting(created.id, MeetingEdit(duration=75), ceo)

    refreshed = await CompanyRepository(session, CLIENT_ID).get_by_id(company.id)
    assert refreshed.last_meeting_duration == 75


async def test_completed_history_for_company(meetings, make_company, ceo):
    company = await make_company(age_days=30)
    first = await meetings.create_meeting(_meeting(company.id, days_ahead=1), ceo)
    second = await meetings.create_meeting(_meeting(company.id, days_ahead=4), ceo)
    await meetings.create_meeting(_meeting(company.id, days_ahead=6), ceo)
    await meetings.add_meeting_notes(first.id, "One")
    await meetings.add_meeting_notes(second.id, "Two")

    history = await meetings.list_completed_for_company(company.id)

    assert [m.id for m in history] == [second.id, first.id]

    with pytest.raises(NotFoundError):
        await meetings.list_completed_for_company("missing")


async def test_delete_meeting(session, meetings, make_company, ceo):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id), ceo)

    await meetings.delete_meeting(created.id, ceo)

    with pytest.raises(NotFoundError):
        await meetings.get_meeting(created.id)
    assert await MeetingRepository(session, CLIENT_ID).get_by_id(created.id) is None


async def test_company_delete_cascades_to_meetings(session, meetings, make_company, ceo, clock):
    company = await make_company(age_days=30)
    created = await meetings.create_meeting(_meeting(company.id), ceo)

    await CompanyService(session, CLIENT_ID, clock).delete_company(company.id, ceo)

    assert await MeetingRepository(session, CLIENT_ID).get_by_id(created.id) is None
