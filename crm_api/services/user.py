"""User service: directory of assignees and authors."""


from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.exceptions import ConflictError, NotFoundError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.user import User
from crm_api.repositories.user import UserRepository
from crm_api.schemas.user import UserCreate

class UserService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._repo = UserRepository(session, client_id, clock)

    async def list_users(self, pagination: PaginationParams, role: str | None = None):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"role": role},
        )

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def create_user(self, data: UserCreate) -> User:
        if await self._repo.get_by_username(data.username):
            raise ConflictError(f"Username '{data.username}' is already taken")
        return await self._repo.create(
            username=data.username, email=str(data.email), role=data.role.value
        )
