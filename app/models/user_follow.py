# app/models/user_follow.py
from datetime import datetime
from sqlalchemy import CheckConstraint, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db import Base, utcnow


class UserFollow(Base):
    __tablename__  = "user_follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follower_following"),
        CheckConstraint("follower_id != following_id", name="ck_cannot_follow_self"),
        Index("ix_follows_follower", "follower_id", "created_at"),
        Index("ix_follows_following", "following_id", "created_at"),
    )

    id:           Mapped[int]      = mapped_column(primary_key=True, autoincrement=True)
    follower_id:  Mapped[int]      = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    following_id: Mapped[int]      = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at:   Mapped[datetime] = mapped_column(default=utcnow)
