"""SQLAlchemy ORM model for company audits."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.db.types import UTCDateTime
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Audit(Base, IdMixin, TenantMixin, TimestampMixin):
    """One scheduled review of a company.

    Outstanding audits are SCHEDULED or OVERDUE; at most one per company in
    normal operation.
    """

    __tablename__ = "audits"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    assigned_to: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # "SCHEDULED" | "COMPLETED" | "OVERDUE"
    status: Mapped[str] = mapped_column(String(20), default="SCHEDULED", nullable=False, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Cadence that produced scheduled_date; NULL for manually dated audits
    cadence_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
