"""Meeting Pydantic schemas."""


from datetime import datetime

from pydantic import Field, field_validator

from crm_api.core.clock import ensure_utc
from crm_api.domain.company import Company
from crm_api.domain.enums import MeetingStatus, RsvpResponse
from crm_api.domain.meeting import Meeting
from crm_api.schemas.common import CamelModel

class MeetingCreate(CamelModel):
    company_id: str
    scheduled_date: datetime
    duration: int = Field(ge=1, description="Minutes")
    attendees: list[str] = Field(min_length=1)
    notes: str | None = None

    @field_validator("scheduled_date")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

class MeetingEdit(CamelModel):
    scheduled_date: datetime | None = None
    duration: int | None = Field(default=None, ge=1, description="Minutes")
    attendees: list[str] | None = Field(default=None, min_length=1)
    notes: str | None = None

    @field_validator("scheduled_date")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v else v

class MeetingFilters(CamelModel):
    company_id: str | None = None
    created_by: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

class RsvpRequest(CamelModel):
    response: RsvpResponse

class MeetingNotesRequest(CamelModel):
    notes: str = Field(min_length=1)

class MeetingOut(CamelModel):
    id: str
    company_id: str
    scheduled_date: datetime
    duration: int
    attendees: list[str] = Field(default_factory=list)
    notes: str | None = None
    meeting_notes: str | None = None
    created_by: str
    status: MeetingStatus
    rsvp_responses: dict[str, RsvpResponse] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

class MeetingDetailOut(MeetingOut):
    company_name: str

    @classmethod
    def from_row(cls, meeting: Meeting, company: Company) -> "MeetingDetailOut":
        return cls.model_validate(
            {**MeetingOut.model_validate(meeting).model_dump(), "company_name": company.name}
        )
