"""SQLAlchemy ORM models for core tables."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from notify_policy.db import Base

JSONBType = JSONB().with_variant(JSON(), "sqlite")


class TimestampMixin:
    """Mixin that adds created/updated timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class User(Base, TimestampMixin):
    """Application user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)

    notification_preferences: Mapped[NotificationPreferenceRecord] = relationship(
        back_populates="user", uselist=False
    )


class NotificationPreferenceRecord(Base, TimestampMixin):
    """Persisted notification preference blob, one row per user."""

    __tablename__ = "notification_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, unique=True
    )
    preferences: Mapped[dict | None] = mapped_column(JSONBType, nullable=True)

    user: Mapped[User] = relationship(back_populates="notification_preferences")
