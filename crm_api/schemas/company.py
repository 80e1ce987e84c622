"""Company Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from decimal import Decimal

from pydantic import EmailStr, Field, field_validator

from crm_api.domain.enums import Tier
from crm_api.schemas.common import CamelModel, not_in_future

class CompanyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone_number: str = Field(min_length=5, max_length=50)
    website: str | None = None
    start_date: datetime
    ad_spend: Decimal = Decimal("0")

    @field_validator("start_date")
    @classmethod
    def _start_date_not_in_future(cls, v: datetime) -> datetime:
        return not_in_future(v, "startDate")

class CompanyUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, min_length=5, max_length=50)
    website: str | None = None
    start_date: datetime | None = None
    ad_spend: Decimal | None = None

    @field_validator("start_date")
    @classmethod
    def _start_date_not_in_future(cls, v: datetime | None) -> datetime | None:
        return not_in_future(v, "startDate")

class MeetingUpdate(CamelModel):
    meeting_date: datetime
    attendees: list[str] = Field(default_factory=list)
    duration: int | None = Field(default=None, ge=1, description="Minutes")

class CompanyOut(CamelModel):
    id: str
    name: str
    email: str
    phone_number: str
    website: str | None = None
    start_date: datetime
    ad_spend: Decimal
    tier: Tier
    created_by: str
    last_payment_date: datetime | None = None
    last_payment_amount: Decimal | None = None
    last_meeting_date: datetime | None = None
    last_meeting_attendees: list[str] = Field(default_factory=list)
    last_meeting_duration: int | None = None
    created_at: datetime
    updated_at: datetime
