"""Candidate review state machine: accept, reject, defer, edit."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.extraction.types import CONFIDENCE_LEVELS, RISK_LEVELS
from app.models.candidate_weight import CandidateWeight
from app.models.signal import Signal
from app.models.signal_candidate import SignalCandidate
from app.schemas.candidate import CandidateReviewRequest, ReviewResult
from app.services.errors import ConflictError, InvalidRequestError, StorageError, UnitNotFoundError

logger = logging.getLogger(__name__)

REVIEWABLE_STATUSES: tuple[str, ...] = ("pending", "deferred")
EXTRACTION_METHOD = "reflection_engine_v0"
WEIGHT_FIELDS: tuple[str, ...] = ("relevance", "importance", "energy_impact", "confidence", "action_timing", "notes")

# Request key -> column name. Anything not listed here is not editable.
EDITABLE_FIELDS: dict[str, str] = {
    "label": "label",
    "description": "description",
    "confidence_level": "confidence_level",
    "risk_of_misinterpretation": "risk_of_misinterpretation",
    "constraint_type": "constraint_type",
    "trust_evidence": "trust_evidence",
    "action_suggested": "action_suggested",
    "related_themes": "related_themes_json",
    "temporal_context": "temporal_context",
    "suggested_links": "suggested_links_json",
    "source_excerpt": "source_excerpt",
    "excerpt_location": "excerpt_location",
}


def review_candidate(
    db: Session,
    user_id: str,
    candidate_id: int,
    payload: CandidateReviewRequest,
) -> ReviewResult:
    """Apply one review action to an owned candidate."""

    if payload.action == "accept":
        return accept_candidate(
            db,
            user_id,
            candidate_id,
            user_notes=payload.user_notes,
            review_notes=payload.review_notes,
            elevated=payload.elevated,
            reflection_data=payload.reflection_data,
        )
    if payload.action == "reject":
        return reject_candidate(db, user_id, candidate_id, review_notes=payload.review_notes)
    if payload.action == "defer":
        return defer_candidate(
            db,
            user_id,
            candidate_id,
            deferred_until=payload.deferred_until,
            review_notes=payload.review_notes,
        )
    return edit_candidate(db, user_id, candidate_id, payload.updates or {}, review_notes=payload.review_notes)


def accept_candidate(
    db: Session,
    user_id: str,
    candidate_id: int,
    *,
    user_notes: str | None = None,
    review_notes: str | None = None,
    elevated: bool = False,
    reflection_data: dict[str, Any] | None = None,
) -> ReviewResult:
    """Promote a candidate to a Signal; safe to retry.

    The Signal is written before the candidate flag flips. Signal existence is
    what "accepted" means, so a retry after a failed flag update finds the
    Signal and returns it instead of writing a second one.
    """

    candidate = _get_owned_candidate(db, user_id, candidate_id)

    existing = _find_signal_for_candidate(db, user_id, candidate.id)
    if existing is not None:
        if candidate.review_status != "accepted":
            _mark_accepted_quietly(db, user_id, candidate.id, review_notes)
        return ReviewResult(status="accepted", signal_id=existing.id, already_existed=True)

    if candidate.review_status not in REVIEWABLE_STATUSES:
        raise ConflictError("Candidate already reviewed")

    is_elevated = elevated is True or (reflection_data or {}).get("elevated") is True
    signal = Signal(
        user_id=user_id,
        signal_type=candidate.signal_type,
        label=candidate.label,
        description=candidate.description,
        confidence_level=candidate.confidence_level,
        risk_of_misinterpretation=candidate.risk_of_misinterpretation,
        constraint_type=candidate.constraint_type or "none",
        trust_evidence=candidate.trust_evidence,
        action_required=is_elevated,
        user_notes=user_notes,
        status="open",
        extraction_method=EXTRACTION_METHOD,
        extracted_at=candidate.created_at or _utcnow(),
        weights_json=_weights_snapshot(db, user_id, candidate.id),
        reflection_data_json=reflection_data,
        source_conversation_id=candidate.source_conversation_id,
        source_segment_id=candidate.segment_id,
        source_event_id=candidate.source_event_id,
        source_excerpt=candidate.source_excerpt,
        extraction_run_id=candidate.extraction_run_id,
        approved_from_candidate_id=candidate.id,
    )
    try:
        _insert_signal(db, signal)
    except IntegrityError as exc:
        db.rollback()
        concurrent = _find_signal_for_candidate(db, user_id, candidate_id)
        if concurrent is None:
            logger.exception("reflection.signal_insert_failed candidate_id=%s", candidate_id)
            raise StorageError("Failed to create signal") from exc
        return ReviewResult(status="accepted", signal_id=concurrent.id, already_existed=True)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reflection.signal_insert_failed candidate_id=%s", candidate_id)
        raise StorageError("Failed to create signal") from exc

    signal_id = signal.id
    _mark_accepted_quietly(db, user_id, candidate_id, review_notes)
    logger.info("reflection.candidate_accepted candidate_id=%s signal_id=%s", candidate_id, signal_id)
    return ReviewResult(status="accepted", signal_id=signal_id, already_existed=False)


def reject_candidate(
    db: Session,
    user_id: str,
    candidate_id: int,
    *,
    review_notes: str | None = None,
) -> ReviewResult:
    candidate = _get_reviewable_candidate(db, user_id, candidate_id)
    candidate.review_status = "rejected"
    _stamp_review(candidate, user_id, review_notes)
    _commit(db, "reject")
    return ReviewResult(status="rejected")


def defer_candidate(
    db: Session,
    user_id: str,
    candidate_id: int,
    *,
    deferred_until: datetime | None,
    review_notes: str | None = None,
) -> ReviewResult:
    """Defer until a caller-chosen time; no default duration is ever computed."""

    candidate = _get_reviewable_candidate(db, user_id, candidate_id)
    if deferred_until is None:
        raise InvalidRequestError("deferred_until is required for defer")
    candidate.review_status = "deferred"
    candidate.deferred_until = deferred_until
    _stamp_review(candidate, user_id, review_notes)
    _commit(db, "defer")
    return ReviewResult(status="deferred", deferred_until=deferred_until)


def edit_candidate(
    db: Session,
    user_id: str,
    candidate_id: int,
    updates: dict[str, Any],
    *,
    review_notes: str | None = None,
) -> ReviewResult:
    """Change allow-listed descriptive fields; review_status is left alone."""

    candidate = _get_reviewable_candidate(db, user_id, candidate_id)
    if not updates:
        raise InvalidRequestError("No updates provided")
    unknown = sorted(key for key in updates if key not in EDITABLE_FIELDS)
    if unknown:
        raise InvalidRequestError("Fields are not editable", details=unknown)
    _validate_updates(updates)

    for key, value in updates.items():
        setattr(candidate, EDITABLE_FIELDS[key], value)
    if review_notes is not None:
        candidate.review_notes = review_notes
    candidate.updated_at = _utcnow()
    _commit(db, "edit")
    return ReviewResult(status="updated")


def _validate_updates(updates: dict[str, Any]) -> None:
    errors: list[str] = []
    label = updates.get("label")
    if "label" in updates and (not isinstance(label, str) or not 5 <= len(label) <= 100):
        errors.append("label must be 5-100 characters")
    description = updates.get("description")
    if "description" in updates and (not isinstance(description, str) or not 10 <= len(description) <= 500):
        errors.append("description must be 10-500 characters")
    if "confidence_level" in updates and updates["confidence_level"] not in CONFIDENCE_LEVELS:
        errors.append(f"confidence_level must be one of {', '.join(CONFIDENCE_LEVELS)}")
    if "risk_of_misinterpretation" in updates and updates["risk_of_misinterpretation"] not in RISK_LEVELS:
        errors.append(f"risk_of_misinterpretation must be one of {', '.join(RISK_LEVELS)}")
    if "source_excerpt" in updates:
        excerpt = updates["source_excerpt"]
        if not isinstance(excerpt, str) or not excerpt.strip():
            errors.append("source_excerpt must be non-empty")
    if "action_suggested" in updates and not isinstance(updates["action_suggested"], bool):
        errors.append("action_suggested must be a boolean")
    if "related_themes" in updates and updates["related_themes"] is not None:
        themes = updates["related_themes"]
        if not isinstance(themes, list) or not all(isinstance(item, str) for item in themes):
            errors.append("related_themes must be a list of strings")
    if errors:
        raise InvalidRequestError("Invalid updates", details=errors)


def _get_owned_candidate(db: Session, user_id: str, candidate_id: int) -> SignalCandidate:
    candidate = db.scalar(
        select(SignalCandidate).where(
            SignalCandidate.id == candidate_id,
            SignalCandidate.user_id == user_id,
        )
    )
    if candidate is None:
        raise UnitNotFoundError("Candidate not found")
    return candidate


def _get_reviewable_candidate(db: Session, user_id: str, candidate_id: int) -> SignalCandidate:
    candidate = _get_owned_candidate(db, user_id, candidate_id)
    if candidate.review_status not in REVIEWABLE_STATUSES:
        raise ConflictError("Candidate already reviewed")
    return candidate


def _find_signal_for_candidate(db: Session, user_id: str, candidate_id: int) -> Signal | None:
    return db.scalar(
        select(Signal).where(
            Signal.approved_from_candidate_id == candidate_id,
            Signal.user_id == user_id,
        )
    )


def _weights_snapshot(db: Session, user_id: str, candidate_id: int) -> dict[str, Any] | None:
    weight = db.scalar(
        select(CandidateWeight).where(
            CandidateWeight.candidate_id == candidate_id,
            CandidateWeight.user_id == user_id,
        )
    )
    if weight is None:
        return None
    return {name: getattr(weight, name) for name in WEIGHT_FIELDS}


def _insert_signal(db: Session, signal: Signal) -> None:
    db.add(signal)
    db.commit()
    db.refresh(signal)


def _mark_candidate_accepted(
    db: Session,
    user_id: str,
    candidate_id: int,
    review_notes: str | None,
) -> None:
    values: dict[str, Any] = {
        "review_status": "accepted",
        "promotion_status": "promoted",
        "reviewed_at": _utcnow(),
        "reviewed_by": user_id,
    }
    if review_notes is not None:
        values["review_notes"] = review_notes
    db.execute(
        update(SignalCandidate)
        .where(SignalCandidate.id == candidate_id, SignalCandidate.user_id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.commit()


def _mark_accepted_quietly(db: Session, user_id: str, candidate_id: int, review_notes: str | None) -> None:
    """The Signal already exists; a failed flag update is logged, not raised."""

    try:
        _mark_candidate_accepted(db, user_id, candidate_id, review_notes)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("reflection.accept_status_update_failed candidate_id=%s", candidate_id)


def _stamp_review(candidate: SignalCandidate, user_id: str, review_notes: str | None) -> None:
    candidate.reviewed_at = _utcnow()
    candidate.reviewed_by = user_id
    if review_notes is not None:
        candidate.review_notes = review_notes


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reflection.review_write_failed action=%s", action)
        raise StorageError(f"Failed to {action} candidate") from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
