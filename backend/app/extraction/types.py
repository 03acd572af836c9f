"""Typed extraction outputs independent of persistence."""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

SignalType = Literal["pattern", "opportunity", "warning", "insight", "promise"]
ConfidenceLevel = Literal["explicit", "inferred"]
RiskLevel = Literal["low", "medium", "high"]
RunStatus = Literal["success", "partial", "failed"]

SIGNAL_TYPES: tuple[str, ...] = ("pattern", "opportunity", "warning", "insight", "promise")
CONFIDENCE_LEVELS: tuple[str, ...] = ("explicit", "inferred")
RISK_LEVELS: tuple[str, ...] = ("low", "medium", "high")
RUN_STATUSES: tuple[str, ...] = ("success", "partial", "failed")


@dataclass(slots=True)
class TranscriptLine:
    """One non-empty transcript line, optionally attributed to a speaker."""

    message: str
    raw: str
    speaker: str | None = None


@dataclass(slots=True)
class CandidateDraft:
    """Candidate proposed by an extractor, not yet validated or stored."""

    signal_type: SignalType
    label: str
    description: str
    confidence_level: ConfidenceLevel
    excerpt: str
    risk_of_misinterpretation: RiskLevel
    why_surfaced: str
    ambiguity_note: str
    excerpt_location: str | None = None
    constraint_type: str = "none"
    trust_evidence: str | None = None
    action_suggested: bool = False
    related_themes: list[str] | None = None
    temporal_context: str | None = None
    suggested_links: Any = None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready shape the validator and audit log see."""

        return asdict(self)


@dataclass(slots=True)
class ValidationResult:
    """Outcome of validating one extraction response."""

    valid: bool
    status: RunStatus
    errors: list[str] = field(default_factory=list)
    error_type: str | None = None
