"""Audits router.

Static paths (/upcoming, /overdue, /statistics, /schedule/*, /process-overdue,
/company/{id}) are declared before /{audit_id} so they are not captured by it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.cache import ResponseCache, cache_key, get_cache
from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import CollectionResponse, DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.enums import AuditStatus
from crm_api.domain.user import User
from crm_api.routers.deps import get_current_user
from crm_api.schemas.audit import (
    AuditCreate,
    AuditDetailOut,
    AuditFilters,
    AuditOut,
    AuditStatisticsOut,
    AuditUpdate,
    CompleteAuditRequest,
    OverdueSweepOut,
    ScheduleInitialRequest,
    ScheduleUpdateOut,
)
from crm_api.services.audit import AuditService
from crm_api.services.audit_scheduler import AuditSchedulerService

router = APIRouter(prefix="/audits", tags=["Audits"])


def _svc(session: AsyncSession) -> AuditService:
    return AuditService(session, settings.default_client_id)


def _scheduler(session: AsyncSession) -> AuditSchedulerService:
    return AuditSchedulerService(session, settings.default_client_id)


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


@router.get("", response_model=ListResponse[AuditOut])
async def list_audits(
    company_id: Optional[str] = Query(default=None, alias="companyId"),
    assigned_to: Optional[str] = Query(default=None, alias="assignedTo"),
    audit_status: Optional[AuditStatus] = Query(default=None, alias="status"),
    date_from: Optional[datetime] = Query(default=None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(default=None, alias="dateTo"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List audits (paginated, newest scheduled date first by default)."""
    filters = AuditFilters(
        company_id=company_id,
        assigned_to=assigned_to,
        status=audit_status,
        date_from=date_from,
        date_to=date_to,
    )
    items, total = await _svc(session).list_audits(pagination, filters)
    return paginated([AuditOut.model_validate(a) for a in items], total, pagination.page, pagination.limit)


@router.post("", response_model=DataResponse[AuditOut], status_code=status.HTTP_201_CREATED)
async def create_audit(
    body: AuditCreate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    audit = await _svc(session).create_audit(body)
    return {"data": AuditOut.model_validate(audit)}


# ---------------------------------------------------------------------------
# Scheduling operations
# ---------------------------------------------------------------------------


@router.post("/schedule/initial", response_model=DataResponse[AuditOut], status_code=status.HTTP_201_CREATED)
async def schedule_initial_audit(
    body: ScheduleInitialRequest,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Schedule a company's first audit from its age-based cadence.

    With ``onlyIfMissing`` the company's existing outstanding audit is
    returned instead of creating a second one.
    """
    scheduler = _scheduler(session)
    if body.only_if_missing:
        audit = await scheduler.schedule_initial_audit_if_missing(body.company_id, body.assigned_to)
    else:
        audit = await scheduler.schedule_initial_audit(body.company_id, body.assigned_to)
    return {"data": AuditOut.model_validate(audit)}


@router.post("/schedule/update-all", response_model=DataResponse[ScheduleUpdateOut])
async def update_all_schedules(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await _scheduler(session).update_all_schedules()
    return {"data": ScheduleUpdateOut.model_validate(result)}


@router.post("/process-overdue", response_model=DataResponse[OverdueSweepOut])
async def process_overdue_audits(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Mark every scheduled audit whose date has passed as OVERDUE."""
    result = await _scheduler(session).process_overdue_audits()
    return {
        "data": OverdueSweepOut(
            marked_count=result.marked_count,
            audits=[AuditOut.model_validate(a) for a in result.audits],
        )
    }


# ---------------------------------------------------------------------------
# Dashboard views
# ---------------------------------------------------------------------------


@router.get("/upcoming", response_model=CollectionResponse[AuditDetailOut])
async def list_upcoming_audits(
    days: Optional[int] = Query(default=None, ge=0, le=365),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await _svc(session).list_upcoming(days)
    return {"data": [AuditDetailOut.from_row(a, c) for a, c in rows]}


@router.get("/overdue", response_model=CollectionResponse[AuditDetailOut])
async def list_overdue_audits(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await _svc(session).list_overdue()
    return {"data": [AuditDetailOut.from_row(a, c) for a, c in rows]}


@router.get("/statistics", response_model=DataResponse[AuditStatisticsOut])
async def audit_statistics(
    request: Request,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    cache: ResponseCache = Depends(get_cache),
):
    key = cache_key(request, user.id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    stats = await _scheduler(session).get_statistics()
    payload = {"data": AuditStatisticsOut.model_validate(stats).model_dump(by_alias=True)}
    cache.set(key, payload)
    return payload


@router.get("/company/{company_id}", response_model=CollectionResponse[AuditOut])
async def list_company_audits(
    company_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    audits = await _svc(session).list_company_audits(company_id)
    return {"data": [AuditOut.model_validate(a) for a in audits]}


# ---------------------------------------------------------------------------
# Single audit
# ---------------------------------------------------------------------------


@router.get("/{audit_id}", response_model=DataResponse[AuditDetailOut])
async def get_audit(
    audit_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    audit, company = await _svc(session).get_audit(audit_id)
    return {"data": AuditDetailOut.from_row(audit, company)}


@router.put("/{audit_id}", response_model=DataResponse[AuditOut])
async def update_audit(
    audit_id: str,
    body: AuditUpdate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    audit = await _svc(session).update_audit(audit_id, body)
    return {"data": AuditOut.model_validate(audit)}


@router.post("/{audit_id}/complete", response_model=DataResponse[AuditOut])
async def complete_audit(
    audit_id: str,
    body: Optional[CompleteAuditRequest] = Body(default=None),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Complete an audit; the next one is scheduled from the company's current cadence."""
    audit = await _scheduler(session).complete_audit(audit_id, body.notes if body else None)
    return {"data": AuditOut.model_validate(audit)}


@router.delete("/{audit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_audit(
    audit_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _svc(session).delete_audit(audit_id)
