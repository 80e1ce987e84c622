"""SQLAlchemy ORM model for the company tier change log (append-only)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class TierChangeLog(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "tier_change_logs"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_tier: Mapped[str] = mapped_column(String(10), nullable=False)
    new_tier: Mapped[str] = mapped_column(String(10), nullable=False)
    # "AUTOMATIC" | "MANUAL_OVERRIDE"
    reason: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    changed_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
