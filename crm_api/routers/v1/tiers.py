"""Tier management router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.cache import ResponseCache, cache_key, get_cache
from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import CollectionResponse, DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.enums import TierChangeReason
from crm_api.domain.user import User
from crm_api.routers.deps import get_current_user
from crm_api.schemas.tier import (
    CanOverrideOut,
    TierChangeLogOut,
    TierOverrideRequest,
    TierReviewOut,
    TierStatisticsOut,
    TierUpdateOut,
)
from crm_api.services.tier import TierService, can_override

router = APIRouter(prefix="/tiers", tags=["Tiers"])


def _svc(session: AsyncSession) -> TierService:
    return TierService(session, settings.default_client_id)


@router.post("/update-all", response_model=DataResponse[TierUpdateOut])
async def update_all_tiers(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Recompute every company's tier from its start date and ad spend."""
    result = await _svc(session).update_all_tiers()
    return {"data": TierUpdateOut.model_validate(result)}


@router.post("/companies/{company_id}/override", response_model=DataResponse[TierChangeLogOut])
async def override_tier(
    company_id: str,
    body: TierOverrideRequest,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    log = await _svc(session).override_tier(company_id, body.tier, user, body.reason)
    return {"data": TierChangeLogOut.model_validate(log)}


@router.get("/companies/{company_id}/history", response_model=CollectionResponse[TierChangeLogOut])
async def tier_history(
    company_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    logs = await _svc(session).get_tier_history(company_id)
    return {"data": [TierChangeLogOut.model_validate(log) for log in logs]}


@router.get("/statistics", response_model=DataResponse[TierStatisticsOut])
async def tier_statistics(
    request: Request,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    cache: ResponseCache = Depends(get_cache),
):
    key = cache_key(request, user.id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    stats = await _svc(session).get_tier_statistics()
    payload = {"data": TierStatisticsOut.model_validate(stats).model_dump(by_alias=True)}
    cache.set(key, payload)
    return payload


@router.get("/review", response_model=CollectionResponse[TierReviewOut])
async def companies_needing_review(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Companies whose stored tier differs from what the classifier would assign today."""
    review = await _svc(session).get_companies_needing_review()
    return {"data": [TierReviewOut.model_validate(r) for r in review]}


@router.get("/can-override", response_model=DataResponse[CanOverrideOut])
async def can_override_tiers(user: User = Depends(get_current_user)):
    return {"data": CanOverrideOut(can_override=can_override(user))}


@router.get("/logs", response_model=ListResponse[TierChangeLogOut])
async def list_tier_logs(
    company_id: Optional[str] = Query(default=None, alias="companyId"),
    reason: Optional[TierChangeReason] = Query(default=None),
    changed_by: Optional[str] = Query(default=None, alias="changedBy"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = await _svc(session).list_change_logs(
        pagination, company_id=company_id, reason=reason, changed_by=changed_by
    )
    return paginated(
        [TierChangeLogOut.model_validate(log) for log in items], total, pagination.page, pagination.limit
    )
