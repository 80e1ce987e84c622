"""SQLAlchemy ORM model for company payments."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.db.types import UTCDateTime
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Payment(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "payments"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
