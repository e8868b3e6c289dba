# app/models/prompt.py
from datetime import datetime
from typing import List
from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db import Base, utcnow
from app.models.user import User


class Prompt(Base):
    __tablename__  = "prompts"
    __table_args__ = (
        Index("ix_prompts_author_created", "author_id", "created_at"),
    )

    id:             Mapped[int]       = mapped_column(primary_key=True, autoincrement=True)
    author_id:      Mapped[int]       = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title:          Mapped[str]       = mapped_column(String(100), nullable=False)
    description:    Mapped[str]       = mapped_column(String(300), nullable=False)
    content:        Mapped[str]       = mapped_column(Text, nullable=False)
    category:       Mapped[str]       = mapped_column(String(50), nullable=False, index=True)
    tags:           Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    like_count:     Mapped[int]       = mapped_column(default=0, nullable=False)
    view_count:     Mapped[int]       = mapped_column(default=0, nullable=False)
    bookmark_count: Mapped[int]       = mapped_column(default=0, nullable=False)
    average_rating: Mapped[float]     = mapped_column(default=0.0, nullable=False)
    rating_count:   Mapped[int]       = mapped_column(default=0, nullable=False)
    is_public:      Mapped[bool]      = mapped_column(default=True, nullable=False)
    created_at:     Mapped[datetime]  = mapped_column(default=utcnow)
    updated_at:     Mapped[datetime]  = mapped_column(default=utcnow, onupdate=utcnow)

    author: Mapped[User] = relationship(lazy="joined")
