"""Calendar event and event context schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CalendarEventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    starts_at: datetime
    ends_at: datetime | None = None
    location: str | None = Field(default=None, max_length=255)
    attendees: list[str] = Field(default_factory=list)


class CalendarEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    starts_at: datetime
    ends_at: datetime | None = None
    location: str | None = None
    attendees_json: list[str]
    extraction_status: str
    created_at: datetime


class EventContextCreate(BaseModel):
    content: str = Field(min_length=1)
    context_type: Literal["note", "conversation"] = "note"


class EventContextRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    context_type: str
    content: str
    created_at: datetime
