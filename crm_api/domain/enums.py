"""String enums shared by ORM models, schemas and services."""

import enum


class Tier(str, enum.Enum):
    TIER_1 = "TIER_1"  # high weekly ad spend
    TIER_2 = "TIER_2"  # new company
    TIER_3 = "TIER_3"  # established, low weekly ad spend


class AuditStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


OUTSTANDING_AUDIT_STATUSES = (AuditStatus.SCHEDULED, AuditStatus.OVERDUE)


class UserRole(str, enum.Enum):
    CEO = "CEO"
    MANAGER = "MANAGER"
    TEAM_MEMBER = "TEAM_MEMBER"


ADMIN_ROLES = (UserRole.CEO, UserRole.MANAGER)


class TierChangeReason(str, enum.Enum):
    AUTOMATIC = "AUTOMATIC"
    MANUAL_OVERRIDE = "MANUAL_OVERRIDE"


class NotificationType(str, enum.Enum):
    AUDIT_DUE = "AUDIT_DUE"
    COMPANY_MILESTONE = "COMPANY_MILESTONE"
    MEETING_REMINDER = "MEETING_REMINDER"


class MeetingStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"  # at least one attendee is going
    COMPLETED = "COMPLETED"  # meeting notes recorded


class RsvpResponse(str, enum.Enum):
    GOING = "GOING"
    NOT_GOING = "NOT_GOING"
