"""Calendar event ORM model."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class CalendarEvent(Base, IdMixin, CreatedAtMixin):
    """Calendar event; its attached contexts form one extraction unit."""

    __tablename__ = "calendar_events"

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attendees_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    extraction_status: Mapped[str] = mapped_column(String(32), default="unprocessed", nullable=False)
