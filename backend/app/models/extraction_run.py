"""Extraction run audit log model."""

from sqlalchemy import JSON, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class ExtractionRun(Base, IdMixin, CreatedAtMixin):
    """Immutable record written once per extraction attempt, success or failure."""

    __tablename__ = "extraction_runs"

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    conversation_id: Mapped[int | None] = mapped_column(index=True, nullable=True)
    segment_id: Mapped[int | None] = mapped_column(index=True, nullable=True)
    event_id: Mapped[int | None] = mapped_column(index=True, nullable=True)
    model_name: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    error_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    error_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw_output_json: Mapped[dict[str, object]] = mapped_column(JSON, default=dict, nullable=False)
    candidates_generated: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    execution_time_ms: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
