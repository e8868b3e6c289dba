# app/models/user.py
from datetime import datetime
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from app.db import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id:              Mapped[int]      = mapped_column(primary_key=True, autoincrement=True)
    email:           Mapped[str]      = mapped_column(String(255), unique=True, nullable=False)
    nickname:        Mapped[str]      = mapped_column(String(30), unique=True, nullable=False)
    follower_count:  Mapped[int]      = mapped_column(default=0, nullable=False)
    following_count: Mapped[int]      = mapped_column(default=0, nullable=False)
    created_at:      Mapped[datetime] = mapped_column(default=utcnow)
    updated_at:      Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)
