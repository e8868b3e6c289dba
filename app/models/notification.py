# app/models/notification.py
import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db import Base, utcnow
from app.models.user import User


class NotificationType(str, enum.Enum):
    NEW_PROMPT_FROM_FOLLOWED = "NEW_PROMPT_FROM_FOLLOWED"
    USER_FOLLOWED = "USER_FOLLOWED"
    PROMPT_LIKED = "PROMPT_LIKED"
    PROMPT_RATED = "PROMPT_RATED"
    PROMPT_BOOKMARKED = "PROMPT_BOOKMARKED"
    SYSTEM_ANNOUNCEMENT = "SYSTEM_ANNOUNCEMENT"


class NotificationEntityType(str, enum.Enum):
    USER = "USER"
    PROMPT = "PROMPT"
    RATING = "RATING"
    BOOKMARK = "BOOKMARK"


class Notification(Base):
    __tablename__  = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_read", "recipient_id", "is_read", "created_at"),
    )

    id:           Mapped[int]                              = mapped_column(primary_key=True, autoincrement=True)
    recipient_id: Mapped[int]                              = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id:    Mapped[Optional[int]]                    = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type:         Mapped[NotificationType]                 = mapped_column(Enum(NotificationType, native_enum=False, length=50))
    entity_type:  Mapped[Optional[NotificationEntityType]] = mapped_column(Enum(NotificationEntityType, native_enum=False, length=50), nullable=True)
    entity_id:    Mapped[Optional[int]]                    = mapped_column(nullable=True)
    title:        Mapped[str]                              = mapped_column(String(200), nullable=False)
    message:      Mapped[str]                              = mapped_column(Text, nullable=False)
    is_read:      Mapped[bool]                             = mapped_column(default=False, nullable=False)
    read_at:      Mapped[Optional[datetime]]               = mapped_column(nullable=True)
    created_at:   Mapped[datetime]                         = mapped_column(default=utcnow)

    sender: Mapped[Optional[User]] = relationship(foreign_keys=[sender_id], lazy="joined")

    def mark_as_read(self, when: datetime) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = when
