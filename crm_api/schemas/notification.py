"""Notification Pydantic schemas."""


from datetime import datetime

from crm_api.domain.enums import NotificationType
from crm_api.schemas.common import CamelModel

class NotificationOut(CamelModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    related_company_id: str | None = None
    scheduled_for: datetime
    is_read: bool
    created_at: datetime
