"""Raw conversation, segment and map schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ConversationCreate(BaseModel):
    """Pasted transcript upload."""

    title: str | None = Field(default=None, max_length=255)
    raw_text: str = Field(min_length=1)
    source: Literal["paste", "whatsapp", "upload"] = "paste"


class ConversationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str | None = None
    source: str
    status: str
    processed_at: datetime | None = None
    created_at: datetime


class SegmentRequest(BaseModel):
    """Segmentation options."""

    message_cap: int | None = Field(default=None, ge=1, le=10000)


class SegmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    segment_index: int
    message_count: int
    extraction_status: str
    created_at: datetime


class ConversationMapResult(BaseModel):
    """Validated map plus the audit record of the run that produced it."""

    conversation_id: int
    ai_run_id: int
    map: dict[str, Any]
