"""SQLAlchemy ORM model for application users (audit assignees, note authors)."""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class User(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("client_id", "username", name="uq_users_client_username"),)

    username: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    # "CEO" | "MANAGER" | "TEAM_MEMBER"
    role: Mapped[str] = mapped_column(String(20), default="TEAM_MEMBER", nullable=False, index=True)
