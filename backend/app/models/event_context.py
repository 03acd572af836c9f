"""Event context ORM model."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class EventContext(Base, IdMixin, CreatedAtMixin):
    """Free-text note or conversation excerpt attached to a calendar event."""

    __tablename__ = "event_contexts"

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    event_id: Mapped[int] = mapped_column(
        ForeignKey("calendar_events.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    context_type: Mapped[str] = mapped_column(String(32), default="note", nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
