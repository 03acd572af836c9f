"""Heuristic structural map of a raw conversation.

Orientation only: who spoke, rough phases, recurring themes. Nothing here
ranks or weighs content.
"""

from __future__ import annotations

import re
from typing import Any

SPEAKER_PREFIX_PATTERN = re.compile(r"^([^:]{2,20}):\s")
PARTICIPANT_SCAN_LIMIT = 500
SHORT_TEXT_THRESHOLD = 100

_THEME_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Scheduling", re.compile(r"schedule|time|meet", re.IGNORECASE)),
    ("Financial", re.compile(r"price|cost|budget", re.IGNORECASE)),
    ("Planning", re.compile(r"plan|strategy|roadmap", re.IGNORECASE)),
)


def build_conversation_map(text: str) -> dict[str, Any]:
    """Return the map payload for one conversation's raw text."""

    raw = text or ""
    lines = [line for line in raw.split("\n") if line.strip()]

    participants: list[str] = []
    for line in lines[:PARTICIPANT_SCAN_LIMIT]:
        match = SPEAKER_PREFIX_PATTERN.match(line.strip())
        if match is None:
            continue
        name = match.group(1).strip()
        if name not in participants:
            participants.append(name)

    total = len(lines)
    third = total // 3
    phases = [
        {
            "name": "Opening / Context",
            "summary": "Initial exchange and context setting.",
            "line_start": 1,
            "line_end": third,
        },
        {
            "name": "Core Discussion",
            "summary": "Main exchange of information and points.",
            "line_start": third + 1,
            "line_end": third * 2,
        },
        {
            "name": "Closing / Next Steps",
            "summary": "Wrap up and potential follow-ups.",
            "line_start": third * 2 + 1,
            "line_end": total,
        },
    ]

    themes = ["General Discussion"]
    themes.extend(name for name, pattern in _THEME_PATTERNS if pattern.search(raw))

    guardrails = ["Verify speaker identities (inferred from text)."]
    if not participants:
        guardrails.append("No clear speakers detected; transcript might be raw prose.")

    quality = "medium"
    if len(raw) < SHORT_TEXT_THRESHOLD:
        quality = "low"
    if len(participants) > 1:
        quality = "high"

    return {
        "participants": participants,
        "themes": themes,
        "phases": phases,
        "signal_zones": [{"phase_idx": 1, "reason": "Dense run of discussion turns."}],
        "guardrails": guardrails,
        "readiness": {
            "quality": quality,
            "reason": "Speakers identified" if participants else "Unstructured text",
        },
        "metadata": {
            "length_chars": len(raw),
            "message_count": total,
            "detected_language": "en",
        },
    }
