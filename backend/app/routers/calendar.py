"""Calendar event and event context routes."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.auth import get_current_user_id
from app.db.dependencies import get_db
from app.routers.errors import ERROR_RESPONSES, as_http_exception
from app.schemas.calendar import CalendarEventCreate, CalendarEventRead, EventContextCreate, EventContextRead
from app.schemas.common import ApiResponse
from app.services.calendar import add_event_context, create_calendar_event, list_calendar_events, list_event_contexts
from app.services.errors import ReflectionError

router = APIRouter(prefix="/events", responses=ERROR_RESPONSES)


@router.post("", response_model=ApiResponse[CalendarEventRead], status_code=201)
def post_event(
    payload: CalendarEventCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[CalendarEventRead]:
    try:
        event = create_calendar_event(db, user_id, payload)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=CalendarEventRead.model_validate(event))


@router.get("", response_model=ApiResponse[list[CalendarEventRead]])
def get_events(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[CalendarEventRead]]:
    events = list_calendar_events(db, user_id)
    return ApiResponse(data=[CalendarEventRead.model_validate(event) for event in events])


@router.post("/{event_id}/contexts", response_model=ApiResponse[EventContextRead], status_code=201)
def post_event_context(
    payload: EventContextCreate,
    event_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[EventContextRead]:
    """Attach a note to an event."""

    try:
        context = add_event_context(db, user_id, event_id, payload)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=EventContextRead.model_validate(context))


@router.get("/{event_id}/contexts", response_model=ApiResponse[list[EventContextRead]])
def get_event_contexts(
    event_id: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ApiResponse[list[EventContextRead]]:
    try:
        contexts = list_event_contexts(db, user_id, event_id)
    except ReflectionError as exc:
        raise as_http_exception(exc) from exc
    return ApiResponse(data=[EventContextRead.model_validate(context) for context in contexts])
