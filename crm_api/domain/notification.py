"""SQLAlchemy ORM model for in-app notifications."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.db.types import UTCDateTime
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Notification(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # "AUDIT_DUE" | "COMPANY_MILESTONE" | "MEETING_REMINDER"
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_company_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    scheduled_for: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
