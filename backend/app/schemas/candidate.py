"""Candidate listing and review schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ReviewAction = Literal["accept", "reject", "defer", "edit"]
ReviewStatus = Literal["pending", "accepted", "rejected", "deferred"]


class CandidateRead(BaseModel):
    """Serialized signal candidate."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    signal_type: str
    label: str
    description: str | None = None
    confidence_level: str
    risk_of_misinterpretation: str
    source_excerpt: str
    excerpt_location: str | None = None
    constraint_type: str
    trust_evidence: str | None = None
    action_suggested: bool
    related_themes_json: list[str] | None = None
    temporal_context: str | None = None
    suggested_links_json: Any = None
    why_surfaced: str | None = None
    ambiguity_note: str | None = None
    source_conversation_id: int | None = None
    segment_id: int | None = None
    source_event_id: int | None = None
    extraction_run_id: int | None = None
    review_status: str
    review_notes: str | None = None
    reviewed_at: datetime | None = None
    deferred_until: datetime | None = None
    promotion_status: str
    created_at: datetime
    updated_at: datetime


class CandidateReviewRequest(BaseModel):
    """One review action on a candidate."""

    action: ReviewAction
    review_notes: str | None = None
    deferred_until: datetime | None = None
    updates: dict[str, Any] | None = None
    user_notes: str | None = None
    elevated: bool = False
    reflection_data: dict[str, Any] | None = None


class ReviewResult(BaseModel):
    """Outcome of a review action."""

    status: Literal["accepted", "rejected", "deferred", "updated"]
    signal_id: int | None = None
    already_existed: bool | None = None
    deferred_until: datetime | None = None


class CandidateWeightRequest(BaseModel):
    """User-owned weights; stored as given, never derived."""

    relevance: int | None = Field(default=None, ge=1, le=5)
    importance: int | None = Field(default=None, ge=1, le=5)
    energy_impact: int | None = Field(default=None, ge=-5, le=5)
    confidence: Literal["Low", "Med", "High"] | None = None
    action_timing: Literal["now", "later", "no"] | None = None
    notes: str | None = None


class CandidateWeightRead(CandidateWeightRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int
    candidate_id: int
    updated_at: datetime
