"""Extraction endpoint schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ExtractRequest(BaseModel):
    """Optional body for an extraction run."""

    model: str | None = Field(default=None, min_length=1, max_length=128)
    force: bool = False


class ExtractionRunRead(BaseModel):
    """Serialized audit record of one extraction attempt."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    conversation_id: int | None = None
    segment_id: int | None = None
    event_id: int | None = None
    model_name: str
    status: str
    error_type: str | None = None
    error_details: str | None = None
    candidates_generated: int
    execution_time_ms: float
    created_at: datetime


class ExtractionRunResult(BaseModel):
    """Extraction execution summary."""

    ai_run: ExtractionRunRead
    candidates_generated: int
