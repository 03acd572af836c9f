"""Extractor interface for pluggable candidate extraction implementations."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.extraction.types import CandidateDraft


class ExtractorInterface(ABC):
    """Abstract extractor interface.

    Implementations must be pure functions of their input: no storage access,
    no clock-dependent output.
    """

    model_name: str = "unknown"

    @abstractmethod
    def extract(self, text: str, *, attendees: Sequence[str] = ()) -> list[CandidateDraft]:
        """Propose candidate drafts for one unit of text."""
