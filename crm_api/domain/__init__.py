"""Domain package: all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  company.py     : Companies (tier is a cached classification)
  audit.py       : Scheduled company audits
  tier_change.py : Append-only tier change log
  note.py        : Free-text notes on companies
  payment.py     : Payments received from companies
  meeting.py     : Meetings with companies (RSVPs, notes)
  notification.py: In-app notifications
  user.py        : Users (assignees, authors)
  enums.py       : Tier, AuditStatus, MeetingStatus, UserRole, ...
  mixins.py      : Shared IdMixin, TimestampMixin, TenantMixin
"""

from crm_api.domain.audit import Audit
from crm_api.domain.company import Company
from crm_api.domain.meeting import Meeting
from crm_api.domain.note import Note
from crm_api.domain.notification import Notification
from crm_api.domain.payment import Payment
from crm_api.domain.tier_change import TierChangeLog
from crm_api.domain.user import User

__all__ = [
    "Audit",
    "Company",
    "Meeting",
    "Note",
    "Notification",
    "Payment",
    "TierChangeLog",
    "User",
]
