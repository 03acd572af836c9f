"""Promoted signal ORM model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class Signal(Base, IdMixin, CreatedAtMixin):
    """Durable, human-approved observation created once per accepted candidate."""

    __tablename__ = "signals"

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    signal_type: Mapped[str] = mapped_column(String(32), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence_level: Mapped[str | None] = mapped_column(String(16), nullable=True)
    risk_of_misinterpretation: Mapped[str | None] = mapped_column(String(16), nullable=True)
    constraint_type: Mapped[str] = mapped_column(String(32), default="none", nullable=False)
    trust_evidence: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    user_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="open", nullable=False)
    extraction_method: Mapped[str] = mapped_column(String(64), nullable=False)
    extracted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    weights_json: Mapped[dict[str, object] | None] = mapped_column(JSON, nullable=True)
    reflection_data_json: Mapped[dict[str, object] | None] = mapped_column(JSON, nullable=True)

    source_conversation_id: Mapped[int | None] = mapped_column(nullable=True)
    source_segment_id: Mapped[int | None] = mapped_column(nullable=True)
    source_event_id: Mapped[int | None] = mapped_column(nullable=True)
    source_excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    extraction_run_id: Mapped[int | None] = mapped_column(nullable=True)
    approved_from_candidate_id: Mapped[int] = mapped_column(unique=True, nullable=False)
