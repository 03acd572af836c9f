"""Raw conversation, segmentation and conversation map routes."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.db.dependencies import get_db
from app.routers.errors import ERROR_RESPONSES, as_http_exception
from app.schemas.common import ApiResponse
from app.schemas.conversation import (
    ConversationCreate,
    ConversationMapResult,
    ConversationRead,
    SegmentRead,
    SegmentRequest,
)
from app.services.conversations import (
    create_conversation,
    generate_conversation_map,
    list_conversations,
    list_segments,
    segment_conversation,
)
from app.services.errors import ReflectionError

router = APIRouter(prefix="/conversations", responses=ERROR_RESPONSES)


@router.post("", response_model=ApiResponse[ConversationRead], status_code=201)
def post_conversation(
    payload: ConversationCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[ConversationRead]:
    """Store a pasted transcript."""

    try:
        conversation = create_conversation(db, user_id, payload)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=ConversationRead.model_validate(conversation))


@router.get("", response_model=ApiResponse[list[ConversationRead]])
def get_conversations(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[ConversationRead]]:
    conversations = list_conversations(db, user_id)
    return ApiResponse(data=[ConversationRead.model_validate(item) for item in conversations])


@router.post("/{conversation_id}/segment", response_model=ApiResponse[list[SegmentRead]], status_code=201)
def post_segmentation(
    payload: SegmentRequest | None = None,
    conversation_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[SegmentRead]]:
    """Split a stored conversation into extraction-sized segments."""

    message_cap = payload.message_cap if payload is not None else None
    try:
        segments = segment_conversation(db, user_id, conversation_id, message_cap=message_cap)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=[SegmentRead.model_validate(segment) for segment in segments])


@router.get("/{conversation_id}/segments", response_model=ApiResponse[list[SegmentRead]])
def get_segments(
    conversation_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[SegmentRead]]:
    try:
        segments = list_segments(db, user_id, conversation_id)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=[SegmentRead.model_validate(segment) for segment in segments])


@router.post("/{conversation_id}/map", response_model=ApiResponse[ConversationMapResult])
def post_conversation_map(
    conversation_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[ConversationMapResult]:
    """Generate (or regenerate) the structural map of a conversation."""

    try:
        result = generate_conversation_map(db, user_id, conversation_id)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=result)
