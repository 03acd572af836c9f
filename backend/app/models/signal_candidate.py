"""Signal candidate ORM model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin


class SignalCandidate(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """Proposed observation awaiting human review."""

    __tablename__ = "signal_candidates"
    # Ids must never be reused after a full replace; signals reference them.
    __table_args__ = {"sqlite_autoincrement": True}

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    signal_type: Mapped[str] = mapped_column(String(32), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence_level: Mapped[str] = mapped_column(String(16), nullable=False)
    risk_of_misinterpretation: Mapped[str] = mapped_column(String(16), nullable=False)
    source_excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    constraint_type: Mapped[str] = mapped_column(String(32), default="none", nullable=False)
    trust_evidence: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_suggested: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    related_themes_json: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    temporal_context: Mapped[str | None] = mapped_column(String(255), nullable=True)
    suggested_links_json: Mapped[object | None] = mapped_column(JSON, nullable=True)
    why_surfaced: Mapped[str | None] = mapped_column(Text, nullable=True)
    ambiguity_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    source_conversation_id: Mapped[int | None] = mapped_column(index=True, nullable=True)
    segment_id: Mapped[int | None] = mapped_column(index=True, nullable=True)
    source_event_id: Mapped[int | None] = mapped_column(index=True, nullable=True)
    extraction_run_id: Mapped[int | None] = mapped_column(index=True, nullable=True)

    review_status: Mapped[str] = mapped_column(String(16), default="pending", index=True, nullable=False)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    deferred_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    promotion_status: Mapped[str] = mapped_column(String(16), default="not_promoted", nullable=False)
