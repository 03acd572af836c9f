"""Raw conversation ingestion, segmentation and conversation maps."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from time import perf_counter

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.extraction.conversation_map import build_conversation_map
from app.extraction.transcript import parse_transcript_lines
from app.extraction.validator import validate_map_response
from app.extraction.vocabulary import ranking_guard
from app.models.conversation_map import ConversationMap
from app.models.conversation_segment import ConversationSegment
from app.models.extraction_run import ExtractionRun
from app.models.raw_conversation import RawConversation
from app.schemas.conversation import ConversationCreate, ConversationMapResult
from app.services.errors import (
    AuditWriteError,
    ConflictError,
    ExtractionValidationError,
    StorageError,
    UnitNotFoundError,
)

logger = logging.getLogger(__name__)

SEGMENTATION_BLOCKING_STATUSES: tuple[str, ...] = ("processing", "processed")


def create_conversation(db: Session, user_id: str, payload: ConversationCreate) -> RawConversation:
    """Store a pasted transcript verbatim; it is never edited afterwards."""

    conversation = RawConversation(
        user_id=user_id,
        title=payload.title.strip() if payload.title else None,
        source=payload.source,
        raw_text=payload.raw_text,
        status="unprocessed",
    )
    db.add(conversation)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to store conversation") from exc
    db.refresh(conversation)
    return conversation


def list_conversations(db: Session, user_id: str) -> list[RawConversation]:
    stmt = (
        select(RawConversation)
        .where(RawConversation.user_id == user_id)
        .order_by(RawConversation.created_at.desc(), RawConversation.id.desc())
    )
    return list(db.scalars(stmt).all())


def get_conversation(db: Session, user_id: str, conversation_id: int) -> RawConversation:
    conversation = db.scalar(
        select(RawConversation).where(
            RawConversation.id == conversation_id,
            RawConversation.user_id == user_id,
        )
    )
    if conversation is None:
        raise UnitNotFoundError("Conversation not found")
    return conversation


def segment_conversation(
    db: Session,
    user_id: str,
    conversation_id: int,
    *,
    message_cap: int | None = None,
) -> list[ConversationSegment]:
    """Split a conversation into consecutive chunks of at most ``message_cap`` lines."""

    conversation = get_conversation(db, user_id, conversation_id)
    cap = message_cap or get_settings().default_segment_message_cap
    raw_text = conversation.raw_text

    try:
        claim = db.execute(
            update(RawConversation)
            .where(
                RawConversation.id == conversation_id,
                RawConversation.user_id == user_id,
                RawConversation.status.not_in(SEGMENTATION_BLOCKING_STATUSES),
            )
            .values(status="processing")
            .execution_options(synchronize_session=False)
        )
        if claim.rowcount == 0:
            db.rollback()
            raise ConflictError("Conversation already processed or processing")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to lock conversation for segmentation") from exc

    lines = parse_transcript_lines(raw_text)
    segments = [
        ConversationSegment(
            user_id=user_id,
            conversation_id=conversation_id,
            segment_index=index,
            segment_text="\n".join(line.raw for line in chunk),
            message_count=len(chunk),
            extraction_status="unprocessed",
        )
        for index, chunk in enumerate(lines[start : start + cap] for start in range(0, len(lines), cap))
    ]

    try:
        db.add_all(segments)
        db.execute(
            update(RawConversation)
            .where(RawConversation.id == conversation_id)
            .values(status="processed", processed_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reflection.segmentation_failed conversation_id=%s", conversation_id)
        _mark_conversation_failed(db, conversation_id)
        raise StorageError("Failed to store segments") from exc

    logger.info(
        "reflection.conversation_segmented conversation_id=%s segments=%d lines=%d cap=%d",
        conversation_id,
        len(segments),
        len(lines),
        cap,
    )
    return list_segments(db, user_id, conversation_id)


def list_segments(db: Session, user_id: str, conversation_id: int) -> list[ConversationSegment]:
    get_conversation(db, user_id, conversation_id)
    stmt = (
        select(ConversationSegment)
        .where(
            ConversationSegment.conversation_id == conversation_id,
            ConversationSegment.user_id == user_id,
        )
        .order_by(ConversationSegment.segment_index.asc())
    )
    return list(db.scalars(stmt).all())


def generate_conversation_map(db: Session, user_id: str, conversation_id: int) -> ConversationMapResult:
    """Build, validate, audit and upsert the structural map of one conversation."""

    settings = get_settings()
    conversation = get_conversation(db, user_id, conversation_id)

    started = perf_counter()
    map_data = build_conversation_map(conversation.raw_text)
    validation = validate_map_response(map_data, ranking_guard(settings.vocabulary_match_mode))
    elapsed_ms = (perf_counter() - started) * 1000.0

    run = ExtractionRun(
        user_id=user_id,
        conversation_id=conversation_id,
        model_name=settings.map_model_name,
        status=validation.status,
        error_type=validation.error_type,
        error_details="; ".join(validation.errors) if validation.errors else None,
        raw_output_json=map_data,
        candidates_generated=0,
        execution_time_ms=elapsed_ms,
    )
    db.add(run)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reflection.audit_write_failed unit=conversation_map conversation_id=%s", conversation_id)
        raise AuditWriteError("Failed to record map run") from exc
    run_id = run.id

    if not validation.valid:
        raise ExtractionValidationError(
            "Conversation map failed validation",
            error_type=validation.error_type or "other",
            details=validation.errors,
            ai_run_id=run_id,
        )

    conversation_map = db.scalar(
        select(ConversationMap).where(ConversationMap.conversation_id == conversation_id)
    )
    if conversation_map is None:
        conversation_map = ConversationMap(user_id=user_id, conversation_id=conversation_id)
        db.add(conversation_map)
    conversation_map.extraction_run_id = run_id
    conversation_map.map_data_json = map_data
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reflection.map_write_failed conversation_id=%s run_id=%s", conversation_id, run_id)
        raise StorageError("Failed to store conversation map", ai_run_id=run_id) from exc

    logger.info(
        "reflection.map_timing conversation_id=%s run_id=%s map_ms=%.2f", conversation_id, run_id, elapsed_ms
    )
    return ConversationMapResult(conversation_id=conversation_id, ai_run_id=run_id, map=map_data)


def _mark_conversation_failed(db: Session, conversation_id: int) -> None:
    try:
        db.execute(
            update(RawConversation)
            .where(RawConversation.id == conversation_id)
            .values(status="failed")
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("reflection.status_update_failed unit=conversation conversation_id=%s", conversation_id)
