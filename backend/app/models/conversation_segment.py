"""Conversation segment ORM model."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin


class ConversationSegment(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """Contiguous chunk of a raw conversation; one extraction unit."""

    __tablename__ = "conversation_segments"

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("raw_conversations.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    segment_index: Mapped[int] = mapped_column(Integer, nullable=False)
    segment_text: Mapped[str] = mapped_column(Text, nullable=False)
    message_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    extraction_status: Mapped[str] = mapped_column(String(32), default="unprocessed", nullable=False)
