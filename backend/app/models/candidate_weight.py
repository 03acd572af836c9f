"""User-owned candidate weights model."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin, UpdatedAtMixin


class CandidateWeight(Base, IdMixin, CreatedAtMixin, UpdatedAtMixin):
    """Weights a user attached to a candidate; never computed by the system."""

    __tablename__ = "candidate_weights"

    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    candidate_id: Mapped[int] = mapped_column(
        ForeignKey("signal_candidates.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    relevance: Mapped[int | None] = mapped_column(Integer, nullable=True)
    importance: Mapped[int | None] = mapped_column(Integer, nullable=True)
    energy_impact: Mapped[int | None] = mapped_column(Integer, nullable=True)
    confidence: Mapped[str | None] = mapped_column(String(8), nullable=True)
    action_timing: Mapped[str | None] = mapped_column(String(8), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
