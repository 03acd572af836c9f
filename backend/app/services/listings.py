"""Read-side listings for candidates and promoted signals."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.signal import Signal
from app.models.signal_candidate import SignalCandidate


def list_candidates(
    db: Session,
    user_id: str,
    *,
    segment_id: int | None = None,
    event_id: int | None = None,
    review_status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[SignalCandidate]:
    """List the caller's candidates in extraction order."""

    stmt = select(SignalCandidate).where(SignalCandidate.user_id == user_id)
    if segment_id is not None:
        stmt = stmt.where(SignalCandidate.segment_id == segment_id)
    if event_id is not None:
        stmt = stmt.where(SignalCandidate.source_event_id == event_id)
    if review_status is not None:
        stmt = stmt.where(SignalCandidate.review_status == review_status)
    stmt = stmt.order_by(SignalCandidate.id.asc()).offset(offset).limit(limit)
    return list(db.scalars(stmt).all())


def list_signals(
    db: Session,
    user_id: str,
    *,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Signal]:
    stmt = select(Signal).where(Signal.user_id == user_id)
    if status is not None:
        stmt = stmt.where(Signal.status == status)
    stmt = stmt.order_by(Signal.created_at.desc(), Signal.id.desc()).offset(offset).limit(limit)
    return list(db.scalars(stmt).all())
