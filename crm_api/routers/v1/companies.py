"""Company CRUD router.

GET /companies is served from the response cache; writes under /companies
invalidate it (see crm_api.middleware.cache).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.cache import ResponseCache, cache_key, get_cache
from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.enums import Tier
from crm_api.domain.user import User
from crm_api.routers.deps import get_current_user
from crm_api.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate, MeetingUpdate
from crm_api.services.company import CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])


def _svc(session: AsyncSession) -> CompanyService:
    return CompanyService(session, settings.default_client_id)


@router.get("", response_model=ListResponse[CompanyOut])
async def list_companies(
    request: Request,
    tier: Optional[Tier] = Query(default=None, description="Filter by tier"),
    search: Optional[str] = Query(default=None, description="Name contains"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    cache: ResponseCache = Depends(get_cache),
):
    """List companies (paginated). Filter by ?tier=TIER_1|TIER_2|TIER_3 and ?search=."""
    key = cache_key(request, user.id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    items, total = await _svc(session).list_companies(pagination, tier=tier, search=search)
    payload = ListResponse[CompanyOut].model_validate(
        paginated([CompanyOut.model_validate(c) for c in items], total, pagination.page, pagination.limit)
    ).model_dump(mode="json", by_alias=True)
    cache.set(key, payload)
    return payload


@router.post("", response_model=DataResponse[CompanyOut], status_code=status.HTTP_201_CREATED)
async def create_company(
    body: CompanyCreate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a company; its tier is computed and its first audit scheduled."""
    company = await _svc(session).create_company(body, user)
    return {"data": CompanyOut.model_validate(company)}


@router.get("/{company_id}", response_model=DataResponse[CompanyOut])
async def get_company(
    company_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    company = await _svc(session).get_company(company_id)
    return {"data": CompanyOut.model_validate(company)}


@router.put("/{company_id}", response_model=DataResponse[CompanyOut])
async def update_company(
    company_id: str,
    body: CompanyUpdate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    company = await _svc(session).update_company(company_id, body)
    return {"data": CompanyOut.model_validate(company)}


@router.put("/{company_id}/meeting", response_model=DataResponse[CompanyOut])
async def record_meeting(
    company_id: str,
    body: MeetingUpdate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    company = await _svc(session).record_meeting(company_id, body)
    return {"data": CompanyOut.model_validate(company)}


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
    company_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Delete a company together with its audits, notes and payments."""
    await _svc(session).delete_company(company_id, user)
