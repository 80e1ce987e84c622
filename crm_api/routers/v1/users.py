"""User directory router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.config import settings
from crm_api.core.pagination import PaginationParams
from crm_api.core.response import DataResponse, ListResponse, paginated
from crm_api.db.base import get_db
from crm_api.domain.enums import UserRole
from crm_api.schemas.user import UserCreate, UserOut
from crm_api.services.user import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def _svc(session: AsyncSession) -> UserService:
    return UserService(session, settings.default_client_id)


@router.get("", response_model=ListResponse[UserOut])
async def list_users(
    role: Optional[UserRole] = Query(default=None),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_users(pagination, role=role.value if role else None)
    return paginated([UserOut.model_validate(u) for u in items], total, pagination.page, pagination.limit)


@router.post("", response_model=DataResponse[UserOut], status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, session: AsyncSession = Depends(get_db)):
    user = await _svc(session).create_user(body)
    return {"data": UserOut.model_validate(user)}


@router.get("/{user_id}", response_model=DataResponse[UserOut])
async def get_user(user_id: str, session: AsyncSession = Depends(get_db)):
    user = await _svc(session).get_user(user_id)
    return {"data": UserOut.model_validate(user)}
