"""Audit Pydantic schemas (request DTOs, response models, scheduler results)."""


from datetime import datetime

from pydantic import Field, field_validator

from crm_api.core.clock import ensure_utc
from crm_api.domain.audit import Audit
from crm_api.domain.company import Company
from crm_api.domain.enums import AuditStatus, Tier
from crm_api.schemas.common import CamelModel

class AuditCreate(CamelModel):
    company_id: str
    scheduled_date: datetime
    assigned_to: str = Field(min_length=1)
    notes: str | None = None

    @field_validator("scheduled_date")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

class AuditUpdate(CamelModel):
    scheduled_date: datetime | None = None
    assigned_to: str | None = Field(default=None, min_length=1)
    status: AuditStatus | None = None
    notes: str | None = None

    @field_validator("scheduled_date")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v else v

class AuditFilters(CamelModel):
    company_id: str | None = None
    assigned_to: str | None = None
    status: AuditStatus | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

class CompleteAuditRequest(CamelModel):
    notes: str | None = None

class ScheduleInitialRequest(CamelModel):
    company_id: str
    assigned_to: str
    only_if_missing: bool = False

class AuditOut(CamelModel):
    id: str
    company_id: str
    scheduled_date: datetime
    completed_date: datetime | None = None
    assigned_to: str
    status: AuditStatus
    notes: str | None = None
    cadence_days: int | None = None
    created_at: datetime
    updated_at: datetime

class AuditDetailOut(AuditOut):
    company_name: str
    company_tier: Tier

    @classmethod
    def from_row(cls, audit: Audit, company: Company) -> "AuditDetailOut":
        return cls.model_validate(
            {
                **AuditOut.model_validate(audit).model_dump(),
                "company_name": company.name,
                "company_tier": company.tier,
            }
        )

class OverdueSweepOut(CamelModel):
    marked_count: int
    audits: list[AuditOut]

class ScheduleUpdateOut(CamelModel):
    updated: int
    created: int
    skipped: int = 0

class AuditStatisticsOut(CamelModel):
    total: int
    completed: int
    scheduled: int
    overdue: int
    upcoming_week: int
