"""Payments router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.user import User
from crm_api.routers.deps import get_current_user
from crm_api.schemas.payment import PaymentCreate, PaymentOut
from crm_api.services.payment import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


def _svc(session: AsyncSession) -> PaymentService:
    return PaymentService(session, settings.default_client_id)


@router.get("", response_model=ListResponse[PaymentOut])
async def list_payments(
    company_id: Optional[str] = Query(default=None, alias="companyId"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = await _svc(session).list_payments(pagination, company_id=company_id)
    return paginated([PaymentOut.model_validate(p) for p in items], total, pagination.page, pagination.limit)


@router.post("", response_model=DataResponse[PaymentOut], status_code=status.HTTP_201_CREATED)
async def record_payment(
    body: PaymentCreate,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Record a payment and refresh the company's last-payment fields."""
    payment = await _svc(session).record_payment(body, user)
    return {"data": PaymentOut.model_validate(payment)}


@router.get("/{payment_id}", response_model=DataResponse[PaymentOut])
async def get_payment(
    payment_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    payment = await _svc(session).get_payment(payment_id)
    return {"data": PaymentOut.model_validate(payment)}


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: str,
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _svc(session).delete_payment(payment_id)
