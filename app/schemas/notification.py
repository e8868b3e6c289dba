from datetime import datetime
from typing import Optional

from app.models.notification import NotificationEntityType, NotificationType
from app.schemas.common import ApiModel


class NotificationSenderOut(ApiModel):
    id: int
    nickname: str


class NotificationOut(ApiModel):
    id: int
    type: NotificationType
    title: str
    message: str
    entity_type: Optional[NotificationEntityType] = None
    entity_id: Optional[int] = None
    sender: Optional[NotificationSenderOut] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class UnreadCountOut(ApiModel):
    count: int


class MarkAllReadOut(ApiModel):
    updated: int
