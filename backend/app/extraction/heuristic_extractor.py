"""Deterministic cue-table extractor for conversation transcripts."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from app.extraction.extractor_interface import ExtractorInterface
from app.extraction.transcript import clamp_text, parse_transcript_lines
from app.extraction.types import CandidateDraft, ConfidenceLevel, RiskLevel, SignalType, TranscriptLine

QUESTION_PATTERN = re.compile(r"\?\s*$|\b(can|could|would|should|shall)\b", re.IGNORECASE)
COMMITMENT_PATTERN = re.compile(r"\b(i'?ll|i will|we will|let'?s|sure|yes)\b", re.IGNORECASE)
SCHEDULING_PATTERN = re.compile(
    r"\b(am|pm|tomorrow|today|monday|tuesday|wednesday|thursday|friday|saturday|sunday"
    r"|at\s\d{1,2}|\d{1,2}:\d{2})\b",
    re.IGNORECASE,
)
FOLLOW_UP_PATTERN = re.compile(r"\b(follow up|connect|call|meet|sync|quick chat|catch up)\b", re.IGNORECASE)
DECISION_PATTERN = re.compile(r"\b(next step|we should|we need|plan|proceed|move ahead|start)\b", re.IGNORECASE)
BLOCKER_PATTERN = re.compile(r"\b(blocked|issue|problem|concern|risk|stuck|can't)\b", re.IGNORECASE)

EXCERPT_MAX_LENGTH = 220
LABEL_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
ANCHOR_MIN_MESSAGE_LENGTH = 25


def is_question(message: str) -> bool:
    return QUESTION_PATTERN.search(message) is not None


def is_scheduling(message: str) -> bool:
    return SCHEDULING_PATTERN.search(message) is not None


def is_follow_up(message: str) -> bool:
    return FOLLOW_UP_PATTERN.search(message) is not None


def is_decision(message: str) -> bool:
    return DECISION_PATTERN.search(message) is not None


def is_blocker(message: str) -> bool:
    return BLOCKER_PATTERN.search(message) is not None


def is_commitment(message: str) -> bool:
    """Affirmation only counts when it is tied to a plan, a meeting or a time."""

    if COMMITMENT_PATTERN.search(message) is None:
        return False
    return is_follow_up(message) or is_scheduling(message) or is_decision(message)


@dataclass(frozen=True, slots=True)
class CueRule:
    """One row of the cue table: what to look for and what to say about it."""

    name: str
    matches: Callable[[str], bool]
    min_length: int
    signal_type: SignalType
    label: str
    description: str
    risk: RiskLevel
    why_surfaced: str
    ambiguity_note: str
    themes: tuple[str, ...]
    confidence: ConfidenceLevel = "explicit"


# Evaluated top to bottom; the order decides which label a borderline line gets first.
CUE_TABLE: tuple[CueRule, ...] = (
    CueRule(
        name="scheduling",
        matches=is_scheduling,
        min_length=6,
        signal_type="opportunity",
        label="Scheduling / coordination",
        description="Conversation includes time coordination. Capture scheduling intent and next-step alignment.",
        risk="low",
        why_surfaced="Detected time/date keywords indicating scheduling.",
        ambiguity_note="Might be a past event reference, not a future plan.",
        themes=("scheduling", "coordination"),
    ),
    CueRule(
        name="follow_up",
        matches=is_follow_up,
        min_length=6,
        signal_type="pattern",
        label="Follow-up loop",
        description=(
            "There is an explicit follow-up loop (connect/sync/call) indicating an open thread "
            "that may be worth tracking."
        ),
        risk="low",
        why_surfaced="Detected follow-up vocabulary.",
        ambiguity_note="Could be a courtesy closing rather than a firm plan.",
        themes=("follow-up", "relationship"),
    ),
    CueRule(
        name="question",
        matches=is_question,
        min_length=10,
        signal_type="insight",
        label="Open question / request",
        description="A direct question or request appears; this may represent an unresolved loop or dependency.",
        risk="medium",
        why_surfaced="Detected question phrasing.",
        ambiguity_note="Question might be rhetorical or already answered.",
        themes=("open-loop",),
    ),
    CueRule(
        name="commitment",
        matches=is_commitment,
        min_length=8,
        signal_type="promise",
        label="Commitment made",
        description="A commitment/affirmation is present. Track as a promise or agreed next action.",
        risk="low",
        why_surfaced="Commitment language detected next to a plan, meeting or time reference.",
        ambiguity_note="Commitment might be casual or conditional.",
        themes=("commitment", "next-steps"),
    ),
    CueRule(
        name="decision",
        matches=is_decision,
        min_length=10,
        signal_type="opportunity",
        label="Next-step intent",
        description="A concrete next step or intent is stated. It can be promoted into a signal if it matters to you.",
        risk="medium",
        why_surfaced="Explicit intent or planning language.",
        ambiguity_note="Action might be hypothetical.",
        themes=("planning", "execution"),
    ),
    CueRule(
        name="blocker",
        matches=is_blocker,
        min_length=10,
        signal_type="warning",
        label="Potential blocker",
        description="A blocker/concern is mentioned. Track as a warning signal to revisit.",
        risk="medium",
        why_surfaced="Friction or blocker words detected.",
        ambiguity_note="Context might mitigate the risk.",
        themes=("risk", "blocker"),
    ),
)

CONTEXT_ANCHOR_RULE = CueRule(
    name="context_anchor",
    matches=lambda message: len(message) > ANCHOR_MIN_MESSAGE_LENGTH,
    min_length=ANCHOR_MIN_MESSAGE_LENGTH + 1,
    signal_type="insight",
    label="Context anchor",
    description="General context captured for review. Use accept/reject to keep only what matters.",
    risk="high",
    why_surfaced="Representative sample for low-signal conversation.",
    ambiguity_note="May not contain actionable insight.",
    themes=("context",),
    confidence="inferred",
)


class HeuristicSignalExtractor(ExtractorInterface):
    """Rule-based transcript extractor; deterministic for auditability."""

    def __init__(
        self,
        *,
        model_name: str = "heuristic-v0",
        line_limit: int = 80,
        candidate_cap: int = 15,
        fallback_target: int = 8,
        rules: Sequence[CueRule] = CUE_TABLE,
    ) -> None:
        self.model_name = model_name
        self._line_limit = line_limit
        self._candidate_cap = candidate_cap
        self._fallback_target = fallback_target
        self._rules = tuple(rules)

    def extract(self, text: str, *, attendees: Sequence[str] = ()) -> list[CandidateDraft]:
        """Scan the first lines of a transcript and propose deduplicated candidates."""

        lines = parse_transcript_lines(text)[: self._line_limit]
        candidates: list[CandidateDraft] = []
        seen: set[str] = set()

        for rule in self._rules:
            for line in lines:
                if len(line.message) < rule.min_length or not rule.matches(line.message):
                    continue
                self._push_unique(candidates, seen, self._build_candidate(rule, line))

        if len(candidates) < self._fallback_target:
            anchors = [line for line in lines if len(line.message) > ANCHOR_MIN_MESSAGE_LENGTH]
            for line in anchors[: self._fallback_target - len(candidates)]:
                draft = self._build_candidate(CONTEXT_ANCHOR_RULE, line, action_suggested=False)
                self._push_unique(candidates, seen, draft)

        return candidates[: self._candidate_cap]

    @staticmethod
    def _push_unique(candidates: list[CandidateDraft], seen: set[str], draft: CandidateDraft) -> None:
        key = f"{draft.label}|{draft.excerpt}".lower()
        if key in seen:
            return
        seen.add(key)
        candidates.append(draft)

    @staticmethod
    def _build_candidate(rule: CueRule, line: TranscriptLine, *, action_suggested: bool = True) -> CandidateDraft:
        return CandidateDraft(
            signal_type=rule.signal_type,
            label=clamp_text(rule.label, LABEL_MAX_LENGTH),
            description=clamp_text(rule.description, DESCRIPTION_MAX_LENGTH),
            confidence_level=rule.confidence,
            excerpt=clamp_text(line.raw, EXCERPT_MAX_LENGTH),
            risk_of_misinterpretation=rule.risk,
            trust_evidence=f"Message by {line.speaker}" if line.speaker else None,
            action_suggested=action_suggested,
            related_themes=list(rule.themes),
            why_surfaced=rule.why_surfaced,
            ambiguity_note=rule.ambiguity_note,
        )
