"""SQLAlchemy ORM model for company notes."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from crm_api.db.base import Base
from crm_api.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Note(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "notes"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
