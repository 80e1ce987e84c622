"""SQLAlchemy ORM model for Companies.

``tier`` is a cached value of :func:`crm_api.services.tiering.classify_tier`
over ``start_date`` and ``ad_spend``. It is refreshed on create, on update and
by the bulk tier recompute, and may drift in between as companies age.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.db.types import UTCDateTime
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Company(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    start_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    ad_spend: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    # "TIER_1" | "TIER_2" | "TIER_3"
    tier: Mapped[str] = mapped_column(String(10), default="TIER_2", nullable=False, index=True)

    created_by: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # Payment tracking (denormalized from payments)
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    last_payment_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    # Meeting tracking
    last_meeting_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    last_meeting_attendees: Mapped[Any] = mapped_column(JSON, default=list, nullable=False)
    last_meeting_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes
