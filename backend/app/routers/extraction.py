"""Extraction execution and audit trail routes."""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.db.dependencies import get_db
from app.routers.errors import ERROR_RESPONSES, as_http_exception
from app.schemas.common import ApiResponse
from app.schemas.extraction import ExtractionRunRead, ExtractionRunResult, ExtractRequest
from app.services.errors import ReflectionError
from app.services.extraction import list_extraction_runs, run_event_extraction, run_segment_extraction

router = APIRouter(responses=ERROR_RESPONSES)


@router.post("/segments/{segment_id}/extract", response_model=ApiResponse[ExtractionRunResult])
def extract_segment(
    payload: ExtractRequest | None = None,
    segment_id: int = Path(..., ge=1),
    force: bool = Query(default=False),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[ExtractionRunResult]:
    """Run extraction for one conversation segment and replace its candidates."""

    options = payload or ExtractRequest()
    try:
        result = run_segment_extraction(
            db,
            user_id,
            segment_id,
            model=options.model,
            force=force or options.force,
        )
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=result)


@router.post("/events/{event_id}/extract", response_model=ApiResponse[ExtractionRunResult])
def extract_event(
    payload: ExtractRequest | None = None,
    event_id: int = Path(..., ge=1),
    force: bool = Query(default=False),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[ExtractionRunResult]:
    """Run observation-only extraction over an event's context notes."""

    options = payload or ExtractRequest()
    try:
        result = run_event_extraction(db, user_id, event_id, force=force or options.force)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=result)


@router.get("/runs", response_model=ApiResponse[list[ExtractionRunRead]])
def get_extraction_runs(
    segment_id: int | None = Query(default=None, ge=1),
    event_id: int | None = Query(default=None, ge=1),
    conversation_id: int | None = Query(default=None, ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[ExtractionRunRead]]:
    runs = list_extraction_runs(
        db,
        user_id,
        segment_id=segment_id,
        event_id=event_id,
        conversation_id=conversation_id,
    )
    return ApiResponse(data=[ExtractionRunRead.model_validate(run) for run in runs])
