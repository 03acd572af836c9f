"""User-owned candidate weights."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.candidate_weight import CandidateWeight
from app.models.signal_candidate import SignalCandidate
from app.schemas.candidate import CandidateWeightRequest
from app.services.errors import StorageError, UnitNotFoundError

logger = logging.getLogger(__name__)


def save_candidate_weights(
    db: Session,
    user_id: str,
    candidate_id: int,
    payload: CandidateWeightRequest,
) -> CandidateWeight:
    """Upsert the caller's weights for one candidate; review_status is untouched."""

    candidate_exists = db.scalar(
        select(SignalCandidate.id).where(
            SignalCandidate.id == candidate_id,
            SignalCandidate.user_id == user_id,
        )
    )
    if candidate_exists is None:
        raise UnitNotFoundError("Candidate not found")

    weight = db.scalar(select(CandidateWeight).where(CandidateWeight.candidate_id == candidate_id))
    if weight is None:
        weight = CandidateWeight(user_id=user_id, candidate_id=candidate_id)
        db.add(weight)
    for field_name, value in payload.model_dump().items():
        setattr(weight, field_name, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reflection.weight_write_failed candidate_id=%s", candidate_id)
        raise StorageError("Failed to save weights") from exc
    db.refresh(weight)
    return weight


def get_candidate_weights(db: Session, user_id: str, candidate_id: int) -> CandidateWeight | None:
    return db.scalar(
        select(CandidateWeight).where(
            CandidateWeight.candidate_id == candidate_id,
            CandidateWeight.user_id == user_id,
        )
    )
