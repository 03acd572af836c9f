"""Conversation map ORM model."""

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin


class ConversationMap(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """Structural orientation map for one conversation (at most one per conversation)."""

    __tablename__ = "conversation_maps"

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("raw_conversations.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    extraction_run_id: Mapped[int | None] = mapped_column(nullable=True)
    map_data_json: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
