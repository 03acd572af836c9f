"""Observation-only proposer for calendar event context notes."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from app.extraction.extractor_interface import ExtractorInterface
from app.extraction.transcript import clamp_text
from app.extraction.types import CandidateDraft, ConfidenceLevel, SignalType

COMMITMENT_CUE = re.compile(r"i will|we will|let's|lets|promise|committed to", re.IGNORECASE)
QUESTION_CUE = re.compile(r"\?|question|ask|wonder|verify|check", re.IGNORECASE)
BLOCKER_CUE = re.compile(r"blocked|issue|problem|concern|stuck|risk|delay", re.IGNORECASE)

EXCERPT_MAX_LENGTH = 220
_SENTENCE_TERMINATORS = ".!?\n"


@dataclass(frozen=True, slots=True)
class _EventCue:
    pattern: re.Pattern[str]
    signal_type: SignalType
    confidence: ConfidenceLevel
    label: str
    description: str
    why_surfaced: str
    ambiguity_note: str
    themes: tuple[str, ...]


EVENT_CUES: tuple[_EventCue, ...] = (
    _EventCue(
        pattern=COMMITMENT_CUE,
        signal_type="promise",
        confidence="inferred",
        label="Possible commitment",
        description="The context indicates a possible commitment or forward-looking intent associated with this event.",
        why_surfaced=(
            "Detected commitment-oriented language ('i will', 'let's', etc.) in the attached notes or conversations."
        ),
        ambiguity_note=(
            "Commitments expressed in text may be casual, aspirational, or already superseded by subsequent actions."
        ),
        themes=("commitment",),
    ),
    _EventCue(
        pattern=QUESTION_CUE,
        signal_type="insight",
        confidence="explicit",
        label="Open question in context",
        description="An open question or unresolved inquiry appears to be anchored to this event context.",
        why_surfaced="Detected interrogative punctuation or inquiry-related terms in the context.",
        ambiguity_note=(
            "The question might be rhetorical, historical, or already resolved within the uncaptured part "
            "of the context."
        ),
        themes=("open-loop",),
    ),
    _EventCue(
        pattern=BLOCKER_CUE,
        signal_type="warning",
        confidence="inferred",
        label="Possible blocker referenced",
        description="A possible structural blocker or identified concern is referenced in relation to this event.",
        why_surfaced="Detected terms associated with friction or constraints (e.g., 'blocked', 'issue').",
        ambiguity_note=(
            "The concern might be minor, temporary, or already mitigated by other factors not present "
            "in these notes."
        ),
        themes=("blocker",),
    ),
)


class EventContextExtractor(ExtractorInterface):
    """Propose observations from the notes attached to one calendar event.

    Only substring presence is checked. There is no fallback sampling: an event
    with no cues yields no candidates.
    """

    def __init__(self, *, model_name: str = "heuristic-proposer-v0") -> None:
        self.model_name = model_name

    def extract(self, text: str, *, attendees: Sequence[str] = ()) -> list[CandidateDraft]:
        content = (text or "").strip()
        if not content:
            return []

        candidates: list[CandidateDraft] = []
        for cue in EVENT_CUES:
            match = cue.pattern.search(content)
            if match is None:
                continue
            candidates.append(
                CandidateDraft(
                    signal_type=cue.signal_type,
                    label=cue.label,
                    description=cue.description,
                    confidence_level=cue.confidence,
                    excerpt=_sentence_around(content, match.start()),
                    excerpt_location="event_context",
                    risk_of_misinterpretation="medium",
                    trust_evidence="Attached event context",
                    related_themes=list(cue.themes),
                    why_surfaced=cue.why_surfaced,
                    ambiguity_note=cue.ambiguity_note,
                )
            )

        seen_attendees: set[str] = set()
        for attendee in attendees:
            name = (attendee or "").strip()
            if not name or name.lower() in seen_attendees:
                continue
            seen_attendees.add(name.lower())
            match = re.search(re.escape(name), content, re.IGNORECASE)
            if match is None:
                continue
            candidates.append(
                CandidateDraft(
                    signal_type="pattern",
                    label=clamp_text(f"Participant mentioned: {name}", 100),
                    description=clamp_text(
                        f"A specific observation regarding {name} is present in the context.", 500
                    ),
                    confidence_level="explicit",
                    excerpt=_sentence_around(content, match.start()),
                    excerpt_location="event_context",
                    risk_of_misinterpretation="low",
                    trust_evidence="Attached event context",
                    related_themes=["participants"],
                    why_surfaced=f"Direct mention of participant '{name}' found in the attached context.",
                    ambiguity_note=(
                        "Mentions of participants are structural; the significance of the mention "
                        "remains entirely user-defined."
                    ),
                )
            )
        return candidates


def _sentence_around(content: str, index: int) -> str:
    """Return the sentence-like fragment containing index."""

    left = max(content.rfind(ch, 0, index) for ch in _SENTENCE_TERMINATORS)
    right_candidates = [pos for pos in (content.find(ch, index) for ch in _SENTENCE_TERMINATORS) if pos != -1]
    right = min(right_candidates) + 1 if right_candidates else len(content)
    snippet = content[left + 1 : right].strip()
    return clamp_text(snippet or content, EXCERPT_MAX_LENGTH)
