"""Tier Pydantic schemas."""


from datetime import datetime

from crm_api.domain.enums import Tier, TierChangeReason
from crm_api.schemas.common import CamelModel

class TierOverrideRequest(CamelModel):
    tier: Tier
    reason: str | None = None

class TierChangeOut(CamelModel):
    company_id: str
    company_name: str
    old_tier: Tier
    new_tier: Tier

class TierUpdateOut(CamelModel):
    total_companies: int
    updated_count: int
    changes: list[TierChangeOut]

class TierChangeLogOut(CamelModel):
    id: str
    company_id: str
    old_tier: Tier
    new_tier: Tier
    reason: TierChangeReason
    changed_by: str | None = None
    notes: str | None = None
    created_at: datetime

class TierStatisticsOut(CamelModel):
    distribution: dict[str, int]
    recent_changes: int
    total_companies: int

class TierReviewOut(CamelModel):
    id: str
    name: str
    tier: Tier
    suggested_tier: Tier
    reason: str

class CanOverrideOut(CamelModel):
    can_override: bool
