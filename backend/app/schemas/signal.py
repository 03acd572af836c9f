"""Signal schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class SignalRead(BaseModel):
    """Serialized promoted signal."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    signal_type: str
    label: str
    description: str | None = None
    confidence_level: str | None = None
    risk_of_misinterpretation: str | None = None
    constraint_type: str
    trust_evidence: str | None = None
    action_required: bool
    user_notes: str | None = None
    status: str
    extraction_method: str
    extracted_at: datetime
    weights_json: dict[str, Any] | None = None
    source_conversation_id: int | None = None
    source_segment_id: int | None = None
    source_event_id: int | None = None
    source_excerpt: str | None = None
    extraction_run_id: int | None = None
    approved_from_candidate_id: int
    created_at: datetime
