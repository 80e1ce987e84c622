"""SQLAlchemy ORM model for meetings with companies.

A meeting becomes COMPLETED once its notes are recorded. The company's
``last_meeting_*`` fields mirror its most recent completed meeting.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.db.types import UTCDateTime
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Meeting(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "meetings"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    attendees: Mapped[Any] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # agenda
    meeting_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # written afterwards
    created_by: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # "SCHEDULED" | "CONFIRMED" | "COMPLETED"
    status: Mapped[str] = mapped_column(String(20), default="SCHEDULED", nullable=False, index=True)
    # user id -> "GOING" | "NOT_GOING"
    rsvp_responses: Mapped[Any] = mapped_column(JSON, default=dict, nullable=False)
