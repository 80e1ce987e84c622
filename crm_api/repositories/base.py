"""Generic async repository with soft-delete, pagination, and tenant isolation."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository. All queries are filtered by client_id.

    Soft-deletes: rows with `deleted_at IS NOT NULL` are excluded from all
    standard reads. Hard-delete is intentionally never exposed.

    Timestamps written here (created_at, updated_at, deleted_at) come from ``clock``.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._session = session
        self._client_id = client_id
        self._clock = clock

    @property
    def session(self) -> AsyncSession:
        return self._session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        """Return a SELECT filtered by client_id and excluding soft-deleted rows."""
        q = select(self.model).where(self.model.client_id == self._client_id)
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    def _apply_filters(self, q, filters: dict[str, Any] | None):
        """Equality filters; list/tuple values become IN clauses. None values are skipped."""
        if not filters:
            return q
        for col_name, value in filters.items():
            if value is None or not hasattr(self.model, col_name):
                continue
            col = getattr(self.model, col_name)
            if isinstance(value, (list, tuple, set)):
                q = q.where(col.in_([getattr(v, "value", v) for v in value]))
            else:
                q = q.where(col == getattr(value, "value", value))
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._apply_filters(self._base_query(), filters)
        return await self._paginate(q, offset=offset, limit=limit, order_by=order_by, order=order)

    async def list_all(
        self,
        *,
        order_by: str = "created_at",
        order: str = "asc",
        filters: dict[str, Any] | None = None,
    ) -> list[ModelT]:
        """Unpaginated read for bulk jobs."""
        q = self._apply_filters(self._base_query(), filters)
        q = self._order(q, order_by, order)
        return list((await self._session.execute(q)).scalars().all())

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        q = self._apply_filters(self._base_query(), filters)
        return await self._count(q)

    async def _count(self, q) -> int:
        count_q = select(func.count()).select_from(q.subquery())
        return (await self._session.execute(count_q)).scalar_one()

    def _order(self, q, order_by: str, order: str):
        col = getattr(self.model, order_by, None)
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        return q

    async def _paginate(
        self, q, *, offset: int, limit: int, order_by: str, order: str
    ) -> tuple[list[ModelT], int]:
        total = await self._count(q)
        q = self._order(q, order_by, order).offset(offset).limit(limit)
        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        if hasattr(self.model, "created_at"):
            now = self._clock()
            kwargs.setdefault("created_at", now)
            kwargs.setdefault("updated_at", now)
        instance = self.model(client_id=self._client_id, **kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        kwargs.pop("client_id", None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = self._clock()

        await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.client_id == self._client_id)
            .values(**kwargs)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        instance = await self.get_by_id(entity_id)
        if instance is not None:
            await self._session.refresh(instance)
        return instance

    async def soft_delete(self, entity_id: str) -> bool:
        result = await self._session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.client_id == self._client_id)
            .where(self.model.deleted_at.is_(None))
            .values(deleted_at=self._clock())
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount > 0

    async def soft_delete_where(self, **criteria: Any) -> int:
        """Soft-delete every live row matching the equality criteria; return the count."""
        stmt = (
            update(self.model)
            .where(self.model.client_id == self._client_id)
            .where(self.model.deleted_at.is_(None))
        )
        for col_name, value in criteria.items():
            stmt = stmt.where(getattr(self.model, col_name) == value)
        result = await self._session.execute(
            stmt.values(deleted_at=self._clock()).execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount
