"""Meeting service: scheduling, RSVPs and post-meeting notes.

Recording notes completes a meeting. The company's ``last_meeting_*`` fields
always mirror its most recent completed meeting, the same way payments drive
``last_payment_*``, so they are resynced whenever a completed meeting is
added, edited or deleted.
"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.config import settings
from crm_api.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.company import Company
from crm_api.domain.enums import MeetingStatus, RsvpResponse
from crm_api.domain.meeting import Meeting
from crm_api.domain.user import User
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.meeting import MeetingRepository
from crm_api.schemas.meeting import MeetingCreate, MeetingEdit, MeetingFilters
from crm_api.services.tier import can_override

logger = logging.getLogger(__name__)


def rsvp_status(responses: dict[str, str]) -> MeetingStatus:
    """CONFIRMED once anyone is going, otherwise SCHEDULED."""
    if any(r == RsvpResponse.GOING.value for r in responses.values()):
        return MeetingStatus.CONFIRMED
    return MeetingStatus.SCHEDULED


class MeetingService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._repo = MeetingRepository(session, client_id, clock)
        self._companies = CompanyRepository(session, client_id, clock)
        self._clock = clock

    def _ensure_future(self, scheduled_date) -> None:
        if scheduled_date <= self._clock():
            raise ValidationError("Meeting must be scheduled for a future date")

    async def _ensure_company(self, company_id: str) -> Company:
        company = await self._companies.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company", company_id)
        return company

    def _ensure_can_modify(self, meeting: Meeting, user: User) -> None:
        if meeting.created_by != user.id and not can_override(user):
            raise ForbiddenError("You do not have permission to modify this meeting")

    async def create_meeting(self, data: MeetingCreate, creator: User) -> Meeting:
        await self._ensure_company(data.company_id)
        self._ensure_future(data.scheduled_date)
        meeting = await self._repo.create(
            company_id=data.company_id,
            scheduled_date=data.scheduled_date,
            duration=data.duration,
            attendees=list(data.attendees),
            notes=data.notes,
            created_by=creator.id,
            status=MeetingStatus.SCHEDULED.value,
            rsvp_responses={},
        )
        logger.info("Scheduled meeting %s with company %s", meeting.id, data.company_id)
        return meeting

    async def list_meetings(self, pagination: PaginationParams, filters: MeetingFilters):
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise ValidationError("dateFrom must not be after dateTo")
        sort = pagination.sort if pagination.sort != "created_at" else "scheduled_date"
        return await self._repo.search(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=sort,
            order=pagination.order,
            filters={"company_id": filters.company_id, "created_by": filters.created_by},
            date_from=filters.date_from,
            date_to=filters.date_to,
        )

    async def list_upcoming(self, days: int | None = None) -> list[tuple[Meeting, Company]]:
        now = self._clock()
        window = days if days is not None else settings.upcoming_meeting_window_days
        return await self._repo.list_in_window(now, now + timedelta(days=window))

    async def get_meeting(self, meeting_id: str) -> tuple[Meeting, Company]:
        row = await self._repo.get_with_company(meeting_id)
        if not row:
            raise NotFoundError("Meeting", meeting_id)
        return row

    async def update_meeting(self, meeting_id: str, data: MeetingEdit, user: User) -> Meeting:
        meeting, _ = await self.get_meeting(meeting_id)
        self._ensure_can_modify(meeting, user)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "scheduled_date" in changes:
            self._ensure_future(changes["scheduled_date"])
        if not changes:
            return meeting
        updated = await self._repo.update(meeting_id, **changes)
        if meeting.status == MeetingStatus.COMPLETED.value:
            await self._sync_company(meeting.company_id)
        return updated  # type: ignore[return-value]

    async def update_rsvp(self, meeting_id: str, user: User, response: RsvpResponse) -> Meeting:
        """Record ``user``'s response. A completed meeting keeps its status."""
        meeting, _ = await self.get_meeting(meeting_id)
        # JSON columns are replaced, never mutated in place.
        responses = {**(meeting.rsvp_responses or {}), user.id: response.value}
        status = meeting.status
        if status != MeetingStatus.COMPLETED.value:
            status = rsvp_status(responses).value
        updated = await self._repo.update(meeting_id, rsvp_responses=responses, status=status)
        return updated  # type: ignore[return-value]

    async def add_meeting_notes(self, meeting_id: str, notes: str) -> Meeting:
        """Store the post-meeting notes and mark the meeting COMPLETED."""
        meeting, _ = await self.get_meeting(meeting_id)
        updated = await self._repo.update(
            meeting_id, meeting_notes=notes, status=MeetingStatus.COMPLETED.value
        )
        await self._sync_company(meeting.company_id)
        logger.info("Completed meeting %s for company %s", meeting_id, meeting.company_id)
        return updated  # type: ignore[return-value]

    async def list_completed_for_company(self, company_id: str) -> list[Meeting]:
        await self._ensure_company(company_id)
        return await self._repo.list_completed_for_company(company_id)

    async def delete_meeting(self, meeting_id: str, user: User) -> None:
        meeting, _ = await self.get_meeting(meeting_id)
        self._ensure_can_modify(meeting, user)
        await self._repo.soft_delete(meeting.id)
        await self._sync_company(meeting.company_id)

    async def _sync_company(self, company_id: str) -> None:
        """Point the company's last-meeting fields at its latest completed meeting."""
        latest = await self._repo.latest_completed_for_company(company_id)
        await self._companies.update(
            company_id,
            last_meeting_date=latest.scheduled_date if latest else None,
            last_meeting_attendees=list(latest.attendees) if latest else [],
            last_meeting_duration=latest.duration if latest else None,
        )
