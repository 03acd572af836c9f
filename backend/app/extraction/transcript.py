"""Transcript line parsing for pasted chat exports."""

from __future__ import annotations

import re

from app.extraction.types import TranscriptLine

# "08/09/17, 9:12 am - Joel: Yes we can"
CHAT_EXPORT_PATTERN = re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4},?\s.*?\s-\s(?P<speaker>[^:]+):\s(?P<message>.+)$")
# "Sarah: let's sync tomorrow"
SPEAKER_PATTERN = re.compile(r"^(?P<speaker>[^:]{2,40}):\s(?P<message>.+)$")


def parse_transcript_lines(text: str) -> list[TranscriptLine]:
    """Split raw text into one record per non-empty line, in order."""

    parsed: list[TranscriptLine] = []
    for line in (text or "").split("\n"):
        raw = line.strip()
        if not raw:
            continue
        match = CHAT_EXPORT_PATTERN.match(raw) or SPEAKER_PATTERN.match(raw)
        if match is None:
            parsed.append(TranscriptLine(message=raw, raw=raw))
            continue
        parsed.append(
            TranscriptLine(
                speaker=match.group("speaker").strip(),
                message=match.group("message").strip(),
                raw=raw,
            )
        )
    return parsed


def clamp_text(value: str | None, max_length: int) -> str:
    """Trim whitespace and cut to max_length, marking the cut with an ellipsis."""

    cleaned = (value or "").strip()
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[: max_length - 1].rstrip() + "…"
