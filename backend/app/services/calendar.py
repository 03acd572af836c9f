"""Manually created calendar events and their context notes."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.calendar_event import CalendarEvent
from app.models.event_context import EventContext
from app.schemas.calendar import CalendarEventCreate, EventContextCreate
from app.services.errors import InvalidRequestError, StorageError, UnitNotFoundError


def create_calendar_event(db: Session, user_id: str, payload: CalendarEventCreate) -> CalendarEvent:
    if payload.ends_at is not None and payload.ends_at < payload.starts_at:
        raise InvalidRequestError("ends_at must not be before starts_at")

    attendees: list[str] = []
    for name in payload.attendees:
        clean = name.strip()
        if clean and clean not in attendees:
            attendees.append(clean)

    event = CalendarEvent(
        user_id=user_id,
        title=payload.title.strip(),
        location=payload.location,
        starts_at=payload.starts_at,
        ends_at=payload.ends_at,
        attendees_json=attendees,
        extraction_status="unprocessed",
    )
    db.add(event)
    _commit(db, "Failed to store calendar event")
    db.refresh(event)
    return event


def list_calendar_events(db: Session, user_id: str) -> list[CalendarEvent]:
    stmt = (
        select(CalendarEvent)
        .where(CalendarEvent.user_id == user_id)
        .order_by(CalendarEvent.starts_at.desc(), CalendarEvent.id.desc())
    )
    return list(db.scalars(stmt).all())


def get_calendar_event(db: Session, user_id: str, event_id: int) -> CalendarEvent:
    event = db.scalar(select(CalendarEvent).where(CalendarEvent.id == event_id, CalendarEvent.user_id == user_id))
    if event is None:
        raise UnitNotFoundError("Event not found")
    return event


def add_event_context(db: Session, user_id: str, event_id: int, payload: EventContextCreate) -> EventContext:
    """Attach a note to an event; it feeds the next extraction over that event."""

    get_calendar_event(db, user_id, event_id)
    context = EventContext(
        user_id=user_id,
        event_id=event_id,
        context_type=payload.context_type,
        content=payload.content.strip(),
    )
    db.add(context)
    _commit(db, "Failed to store event context")
    db.refresh(context)
    return context


def list_event_contexts(db: Session, user_id: str, event_id: int) -> list[EventContext]:
    get_calendar_event(db, user_id, event_id)
    stmt = (
        select(EventContext)
        .where(EventContext.event_id == event_id, EventContext.user_id == user_id)
        .order_by(EventContext.created_at.asc(), EventContext.id.asc())
    )
    return list(db.scalars(stmt).all())


def _commit(db: Session, message: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(message) from exc
