"""Candidate review, weights and promoted signal routes."""

from typing import Literal

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.db.dependencies import get_db
from app.routers.errors import ERROR_RESPONSES, as_http_exception
from app.schemas.candidate import (
    CandidateRead,
    CandidateReviewRequest,
    CandidateWeightRead,
    CandidateWeightRequest,
    ReviewResult,
)
from app.schemas.common import ApiResponse
from app.schemas.signal import SignalRead
from app.services.errors import ReflectionError
from app.services.listings import list_candidates, list_signals
from app.services.review import review_candidate
from app.services.weights import save_candidate_weights

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/candidates", response_model=ApiResponse[list[CandidateRead]])
def get_candidates(
    segment_id: int | None = Query(default=None, ge=1),
    event_id: int | None = Query(default=None, ge=1),
    review_status: Literal["pending", "accepted", "rejected", "deferred"] | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[CandidateRead]]:
    candidates = list_candidates(
        db,
        user_id,
        segment_id=segment_id,
        event_id=event_id,
        review_status=review_status,
        limit=limit,
        offset=offset,
    )
    return ApiResponse(data=[CandidateRead.model_validate(candidate) for candidate in candidates])


@router.post("/candidates/{candidate_id}/review", response_model=ApiResponse[ReviewResult])
def post_candidate_review(
    payload: CandidateReviewRequest,
    response: Response,
    candidate_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[ReviewResult]:
    """Accept, reject, defer or edit one candidate.

    A first accept answers 201; replaying it answers 200 with the same signal id.
    """

    try:
        result = review_candidate(db, user_id, candidate_id, payload)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    if result.status == "accepted" and not result.already_existed:
        response.status_code = 201
    return ApiResponse(data=result)


@router.put("/candidates/{candidate_id}/weight", response_model=ApiResponse[CandidateWeightRead])
def put_candidate_weight(
    payload: CandidateWeightRequest,
    candidate_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[CandidateWeightRead]:
    try:
        weight = save_candidate_weights(db, user_id, candidate_id, payload)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=CandidateWeightRead.model_validate(weight))


@router.get("/signals", response_model=ApiResponse[list[SignalRead]])
def get_signals(
    status: str | None = Query(default=None, min_length=1, max_length=16),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[SignalRead]]:
    signals = list_signals(db, user_id, status=status, limit=limit, offset=offset)
    return ApiResponse(data=[SignalRead.model_validate(signal) for signal in signals])
