"""Forbidden ranking vocabulary and the matcher every validator shares.

The system proposes observations and never ranks them. Any output carrying
ranking, priority or urgency language is a policy breach and fails the run.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Literal

MatchMode = Literal["substring", "word"]

RANKING_TERMS: tuple[str, ...] = (
    "rank",
    "priority",
    "score",
    "urgent",
    "importance",
    "top insight",
    "recommended action",
)

# Event-context proposals are strictly observational, so the list is wider.
OBSERVATIONAL_TERMS: tuple[str, ...] = (
    "top",
    "priority",
    "important",
    "importance",
    "critical",
    "urgent",
    "must",
    "should",
    "high-impact",
    "low-impact",
    "key",
    "strategic",
    "score",
    "rating",
    "rank",
    "best",
    "worst",
)


@dataclass(frozen=True, slots=True)
class VocabularyGuard:
    """Immutable forbidden-term policy with a configurable match mode."""

    terms: tuple[str, ...]
    match_mode: MatchMode = "substring"
    _patterns: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        patterns = tuple(re.compile(rf"\b{re.escape(term.lower())}\b") for term in self.terms)
        object.__setattr__(self, "_patterns", patterns)

    def find_term(self, text: str) -> str | None:
        """Return the first forbidden term present in text, if any."""

        lowered = text.lower()
        if self.match_mode == "word":
            for term, pattern in zip(self.terms, self._patterns):
                if pattern.search(lowered):
                    return term
            return None
        for term in self.terms:
            if term.lower() in lowered:
                return term
        return None

    def find_in_payload(self, payload: Any) -> str | None:
        """Serialize the whole payload and scan it as one lower-cased string."""

        return self.find_term(serialize_payload(payload))


def serialize_payload(payload: Any) -> str:
    """Stable JSON text used for whole-response scanning."""

    return json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str)


def ranking_guard(match_mode: MatchMode = "substring") -> VocabularyGuard:
    return VocabularyGuard(terms=RANKING_TERMS, match_mode=match_mode)


def observational_guard(match_mode: MatchMode = "substring") -> VocabularyGuard:
    return VocabularyGuard(terms=OBSERVATIONAL_TERMS, match_mode=match_mode)
