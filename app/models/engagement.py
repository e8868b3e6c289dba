# app/models/engagement.py
from datetime import datetime
from typing import Optional
from sqlalchemy import CheckConstraint, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db import Base, utcnow
from app.models.prompt import Prompt
from app.models.user import User


class PromptRating(Base):
    __tablename__  = "prompt_ratings"
    __table_args__ = (
        UniqueConstraint("prompt_id", "user_id", name="uq_rating_prompt_user"),
        CheckConstraint("score BETWEEN 1 AND 5", name="ck_rating_score_range"),
    )

    id:         Mapped[int]           = mapped_column(primary_key=True, autoincrement=True)
    prompt_id:  Mapped[int]           = mapped_column(ForeignKey("prompts.id", ondelete="CASCADE"), index=True)
    user_id:    Mapped[int]           = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    score:      Mapped[int]           = mapped_column(nullable=False)
    comment:    Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime]      = mapped_column(default=utcnow)
    updated_at: Mapped[datetime]      = mapped_column(default=utcnow, onupdate=utcnow)

    user: Mapped[User] = relationship(lazy="joined")


class PromptLike(Base):
    __tablename__  = "prompt_likes"
    __table_args__ = (
        UniqueConstraint("prompt_id", "user_id", name="uq_like_prompt_user"),
    )

    id:         Mapped[int]      = mapped_column(primary_key=True, autoincrement=True)
    prompt_id:  Mapped[int]      = mapped_column(ForeignKey("prompts.id", ondelete="CASCADE"), index=True)
    user_id:    Mapped[int]      = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)


class BookmarkFolder(Base):
    __tablename__  = "bookmark_folders"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_folder_user_name"),
    )

    id:             Mapped[int]           = mapped_column(primary_key=True, autoincrement=True)
    user_id:        Mapped[int]           = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name:           Mapped[str]           = mapped_column(String(50), nullable=False)
    description:    Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    bookmark_count: Mapped[int]           = mapped_column(default=0, nullable=False)
    created_at:     Mapped[datetime]      = mapped_column(default=utcnow)
    updated_at:     Mapped[datetime]      = mapped_column(default=utcnow, onupdate=utcnow)


class PromptBookmark(Base):
    __tablename__  = "prompt_bookmarks"
    __table_args__ = (
        UniqueConstraint("prompt_id", "user_id", name="uq_bookmark_prompt_user"),
    )

    id:         Mapped[int]           = mapped_column(primary_key=True, autoincrement=True)
    prompt_id:  Mapped[int]           = mapped_column(ForeignKey("prompts.id", ondelete="CASCADE"), index=True)
    user_id:    Mapped[int]           = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    folder_id:  Mapped[Optional[int]] = mapped_column(ForeignKey("bookmark_folders.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at: Mapped[datetime]      = mapped_column(default=utcnow)
    updated_at: Mapped[datetime]      = mapped_column(default=utcnow, onupdate=utcnow)

    prompt: Mapped[Prompt]                   = relationship(lazy="joined")
    folder: Mapped[Optional[BookmarkFolder]] = relationship(lazy="joined")
