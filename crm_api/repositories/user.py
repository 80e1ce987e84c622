from sqlalchemy import func

from crm_api.domain.enums import UserRole
from crm_api.domain.user import User
from crm_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_username(self, username: str) -> User | None:
        result = await self._session.execute(
            self._base_query().where(func.lower(User.username) == username.lower())
        )
        return result.scalars().first()

    async def first_with_role(self, role: UserRole) -> User | None:
        result = await self._session.execute(
            self._base_query().where(User.role == role.value).order_by(User.created_at.asc()).limit(1)
        )
        return result.scalars().first()

    async def first(self) -> User | None:
        result = await self._session.execute(
            self._base_query().order_by(User.created_at.asc()).limit(1)
        )
        return result.scalars().first()
