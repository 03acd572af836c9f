"""ORM models package exports."""

from app.models.calendar_event import CalendarEvent
from app.models.candidate_weight import CandidateWeight
from app.models.conversation_map import ConversationMap
from app.models.conversation_segment import ConversationSegment
from app.models.event_context import EventContext
from app.models.extraction_run import ExtractionRun
from app.models.raw_conversation import RawConversation
from app.models.signal import Signal
from app.models.signal_candidate import SignalCandidate

__all__ = [
    "RawConversation",
    "ConversationSegment",
    "ConversationMap",
    "CalendarEvent",
    "EventContext",
    "ExtractionRun",
    "SignalCandidate",
    "CandidateWeight",
    "Signal",
]
