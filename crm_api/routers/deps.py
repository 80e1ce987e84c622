"""Shared FastAPI dependencies for v1 routers."""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.config import settings
from crm_api.core.exceptions import UnauthorizedError
from crm_api.db.base import get_db
from crm_api.domain.user import User
from crm_api.repositories.user import UserRepository


async def get_current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the acting user. Authentication itself happens upstream (gateway / SSO)."""
    if not x_user_id:
        raise UnauthorizedError()
    user = await UserRepository(session, settings.default_client_id).get_by_id(x_user_id)
    if not user:
        raise UnauthorizedError("Unknown user")
    return user
