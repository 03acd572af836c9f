"""Extraction run orchestration: claim, extract, validate, audit, replace."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from time import perf_counter
from typing import Any, Literal

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.extraction.event_extractor import EventContextExtractor
from app.extraction.extractor_interface import ExtractorInterface
from app.extraction.heuristic_extractor import HeuristicSignalExtractor
from app.extraction.types import CandidateDraft, ValidationResult
from app.extraction.validator import ResponseValidator, build_event_validator, build_segment_validator
from app.models.calendar_event import CalendarEvent
from app.models.candidate_weight import CandidateWeight
from app.models.conversation_segment import ConversationSegment
from app.models.event_context import EventContext
from app.models.extraction_run import ExtractionRun
from app.models.signal_candidate import SignalCandidate
from app.schemas.extraction import ExtractionRunRead, ExtractionRunResult
from app.services.errors import (
    AuditWriteError,
    ConflictError,
    ExtractionValidationError,
    ExtractorFailedError,
    StorageError,
    UnitNotFoundError,
)

logger = logging.getLogger(__name__)

BLOCKING_STATUSES: tuple[str, ...] = ("processing", "completed")


@dataclass(slots=True)
class _ExtractionUnit:
    kind: Literal["segment", "event"]
    model: type[ConversationSegment] | type[CalendarEvent]
    unit_id: int
    user_id: str
    text: str
    conversation_id: int | None = None
    attendees: list[str] = field(default_factory=list)

    @property
    def segment_id(self) -> int | None:
        return self.unit_id if self.kind == "segment" else None

    @property
    def event_id(self) -> int | None:
        return self.unit_id if self.kind == "event" else None


def get_default_segment_extractor(model_name: str | None = None) -> ExtractorInterface:
    """Return the transcript extractor configured from settings."""

    settings = get_settings()
    return HeuristicSignalExtractor(
        model_name=model_name or settings.transcript_model_name,
        line_limit=settings.transcript_line_limit,
        candidate_cap=settings.candidate_cap,
        fallback_target=settings.fallback_target,
    )


def get_default_event_extractor() -> ExtractorInterface:
    return EventContextExtractor(model_name=get_settings().event_model_name)


def run_segment_extraction(
    db: Session,
    user_id: str,
    segment_id: int,
    *,
    model: str | None = None,
    force: bool = False,
    extractor: ExtractorInterface | None = None,
) -> ExtractionRunResult:
    """Run extraction for one conversation segment and replace its candidates."""

    segment = db.scalar(
        select(ConversationSegment).where(
            ConversationSegment.id == segment_id,
            ConversationSegment.user_id == user_id,
        )
    )
    if segment is None:
        raise UnitNotFoundError("Segment not found")

    unit = _ExtractionUnit(
        kind="segment",
        model=ConversationSegment,
        unit_id=segment.id,
        user_id=user_id,
        text=segment.segment_text or "",
        conversation_id=segment.conversation_id,
    )
    _claim_unit(db, unit, force=force)
    return _execute_run(
        db,
        unit,
        extractor=extractor or get_default_segment_extractor(model),
        validator=build_segment_validator(get_settings().vocabulary_match_mode),
    )


def run_event_extraction(
    db: Session,
    user_id: str,
    event_id: int,
    *,
    force: bool = False,
    extractor: ExtractorInterface | None = None,
) -> ExtractionRunResult:
    """Run observation-only extraction over the notes attached to one event."""

    event = db.scalar(
        select(CalendarEvent).where(CalendarEvent.id == event_id, CalendarEvent.user_id == user_id)
    )
    if event is None:
        raise UnitNotFoundError("Event not found")

    contexts = db.scalars(
        select(EventContext)
        .where(EventContext.event_id == event.id, EventContext.user_id == user_id)
        .order_by(EventContext.created_at.asc(), EventContext.id.asc())
    ).all()
    unit = _ExtractionUnit(
        kind="event",
        model=CalendarEvent,
        unit_id=event.id,
        user_id=user_id,
        text=" ".join(context.content for context in contexts),
        attendees=list(event.attendees_json or []),
    )
    _claim_unit(db, unit, force=force)
    return _execute_run(
        db,
        unit,
        extractor=extractor or get_default_event_extractor(),
        validator=build_event_validator(get_settings().vocabulary_match_mode),
    )


def list_extraction_runs(
    db: Session,
    user_id: str,
    *,
    segment_id: int | None = None,
    event_id: int | None = None,
    conversation_id: int | None = None,
) -> list[ExtractionRun]:
    """List audit records for the caller, newest first."""

    stmt = select(ExtractionRun).where(ExtractionRun.user_id == user_id)
    if segment_id is not None:
        stmt = stmt.where(ExtractionRun.segment_id == segment_id)
    if event_id is not None:
        stmt = stmt.where(ExtractionRun.event_id == event_id)
    if conversation_id is not None:
        stmt = stmt.where(ExtractionRun.conversation_id == conversation_id)
    return list(db.scalars(stmt.order_by(ExtractionRun.id.desc())).all())


def _claim_unit(db: Session, unit: _ExtractionUnit, *, force: bool) -> None:
    """Move the unit to ``processing`` in one conditional UPDATE."""

    model = unit.model
    stmt = update(model).where(model.id == unit.unit_id, model.user_id == unit.user_id)
    if not force:
        stmt = stmt.where(model.extraction_status.not_in(BLOCKING_STATUSES))
    try:
        result = db.execute(
            stmt.values(extraction_status="processing").execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            db.rollback()
            raise ConflictError(f"{unit.kind.capitalize()} already processed or processing")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(f"Failed to lock {unit.kind} for extraction") from exc


def _execute_run(
    db: Session,
    unit: _ExtractionUnit,
    *,
    extractor: ExtractorInterface,
    validator: ResponseValidator,
) -> ExtractionRunResult:
    total_started = perf_counter()
    model_name = getattr(extractor, "model_name", None) or type(extractor).__name__

    try:
        drafts = extractor.extract(unit.text, attendees=unit.attendees)
    except Exception as exc:
        logger.exception(
            "reflection.extractor_failed unit=%s unit_id=%s model=%s", unit.kind, unit.unit_id, model_name
        )
        run = _record_run(
            db,
            unit,
            model_name=model_name,
            validation=ValidationResult(valid=False, status="failed", errors=[str(exc)], error_type="extractor_error"),
            raw_output={},
            candidates_generated=0,
            execution_time_ms=(perf_counter() - total_started) * 1000.0,
        )
        _set_status_quietly(db, unit, "failed")
        raise ExtractorFailedError("Extractor failed before producing output", ai_run_id=run.id) from exc
    extract_ms = (perf_counter() - total_started) * 1000.0

    response: dict[str, Any] = {
        "status": "success",
        "candidates": [draft.to_payload() for draft in drafts],
        "errors": [],
    }
    validation = validator.validate(response)
    run = _record_run(
        db,
        unit,
        model_name=model_name,
        validation=validation,
        raw_output=response,
        candidates_generated=len(drafts),
        execution_time_ms=extract_ms,
    )
    run_id = run.id

    if not validation.valid:
        logger.warning(
            "reflection.extraction_rejected unit=%s unit_id=%s run_id=%s error_type=%s errors=%d",
            unit.kind,
            unit.unit_id,
            run_id,
            validation.error_type,
            len(validation.errors),
        )
        _set_status_quietly(db, unit, "failed")
        raise ExtractionValidationError(
            "Extraction failed validation",
            error_type=validation.error_type or "other",
            details=validation.errors,
            ai_run_id=run_id,
        )

    if not drafts:
        _set_status(db, unit, "no_signals_found")
    else:
        try:
            _replace_candidates(db, unit, drafts, run_id)
        except StorageError:
            logger.exception(
                "reflection.candidate_replace_failed unit=%s unit_id=%s run_id=%s", unit.kind, unit.unit_id, run_id
            )
            _set_status_quietly(db, unit, "failed")
            raise
        _set_status(db, unit, "completed")

    logger.info(
        "reflection.extraction_timing unit=%s unit_id=%s run_id=%s model=%s candidates=%d extract_ms=%.2f total_ms=%.2f",
        unit.kind,
        unit.unit_id,
        run_id,
        model_name,
        len(drafts),
        extract_ms,
        (perf_counter() - total_started) * 1000.0,
    )
    return ExtractionRunResult(ai_run=ExtractionRunRead.model_validate(run), candidates_generated=len(drafts))


def _record_run(
    db: Session,
    unit: _ExtractionUnit,
    *,
    model_name: str,
    validation: ValidationResult,
    raw_output: dict[str, Any],
    candidates_generated: int,
    execution_time_ms: float,
) -> ExtractionRun:
    """Write the audit record; without it the run is treated as never having happened."""

    run = ExtractionRun(
        user_id=unit.user_id,
        conversation_id=unit.conversation_id,
        segment_id=unit.segment_id,
        event_id=unit.event_id,
        model_name=model_name,
        status=validation.status,
        error_type=validation.error_type,
        error_details="; ".join(validation.errors) if validation.errors else None,
        raw_output_json=raw_output,
        candidates_generated=candidates_generated,
        execution_time_ms=execution_time_ms,
    )
    try:
        _insert_extraction_run(db, run)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reflection.audit_write_failed unit=%s unit_id=%s", unit.kind, unit.unit_id)
        _set_status_quietly(db, unit, "failed")
        raise AuditWriteError("Failed to record extraction run") from exc
    return run


def _insert_extraction_run(db: Session, run: ExtractionRun) -> None:
    db.add(run)
    db.commit()
    db.refresh(run)


def _replace_candidates(db: Session, unit: _ExtractionUnit, drafts: list[CandidateDraft], run_id: int) -> None:
    """Delete then insert in one transaction; a failed insert keeps the old rows."""

    try:
        _delete_unit_candidates(db, unit)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to clear old candidates", ai_run_id=run_id) from exc

    rows = [_candidate_row(unit, draft, run_id) for draft in drafts]
    try:
        _insert_candidates(db, rows)
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to insert candidates", ai_run_id=run_id) from exc


def _unit_candidate_filter(unit: _ExtractionUnit):
    if unit.kind == "segment":
        return SignalCandidate.segment_id == unit.unit_id
    return SignalCandidate.source_event_id == unit.unit_id


def _delete_unit_candidates(db: Session, unit: _ExtractionUnit) -> None:
    candidate_ids = select(SignalCandidate.id).where(
        _unit_candidate_filter(unit),
        SignalCandidate.user_id == unit.user_id,
    )
    db.execute(delete(CandidateWeight).where(CandidateWeight.candidate_id.in_(candidate_ids)))
    db.execute(
        delete(SignalCandidate).where(
            _unit_candidate_filter(unit),
            SignalCandidate.user_id == unit.user_id,
        )
    )
    db.flush()


def _insert_candidates(db: Session, rows: list[SignalCandidate]) -> None:
    db.add_all(rows)
    db.commit()


def _candidate_row(unit: _ExtractionUnit, draft: CandidateDraft, run_id: int) -> SignalCandidate:
    return SignalCandidate(
        user_id=unit.user_id,
        signal_type=draft.signal_type,
        label=draft.label,
        description=draft.description,
        confidence_level=draft.confidence_level,
        risk_of_misinterpretation=draft.risk_of_misinterpretation,
        source_excerpt=draft.excerpt,
        excerpt_location=draft.excerpt_location,
        constraint_type=draft.constraint_type or "none",
        trust_evidence=draft.trust_evidence,
        action_suggested=bool(draft.action_suggested),
        related_themes_json=list(draft.related_themes) if draft.related_themes else None,
        temporal_context=draft.temporal_context,
        suggested_links_json=draft.suggested_links,
        why_surfaced=draft.why_surfaced,
        ambiguity_note=draft.ambiguity_note,
        source_conversation_id=unit.conversation_id,
        segment_id=unit.segment_id,
        source_event_id=unit.event_id,
        extraction_run_id=run_id,
        review_status="pending",
    )


def _set_status(db: Session, unit: _ExtractionUnit, status: str) -> None:
    model = unit.model
    try:
        db.execute(
            update(model)
            .where(model.id == unit.unit_id, model.user_id == unit.user_id)
            .values(extraction_status=status)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(f"Failed to mark {unit.kind} {status}") from exc


def _set_status_quietly(db: Session, unit: _ExtractionUnit, status: str) -> None:
    """Status write on a path that is already failing; the original error wins."""

    try:
        _set_status(db, unit, status)
    except StorageError:
        logger.exception(
            "reflection.status_update_failed unit=%s unit_id=%s status=%s", unit.kind, unit.unit_id, status
        )
