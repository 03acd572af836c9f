"""Seed a demo conversation and calendar event, then run extraction on both.

Usage (from repository root):
    python backend/scripts/seed_demo.py

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import delete

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.db.session import SessionLocal
from app.models.calendar_event import CalendarEvent
from app.models.candidate_weight import CandidateWeight
from app.models.extraction_run import ExtractionRun
from app.models.raw_conversation import RawConversation
from app.models.signal import Signal
from app.models.signal_candidate import SignalCandidate
from app.schemas.calendar import CalendarEventCreate, EventContextCreate
from app.schemas.conversation import ConversationCreate
from app.services.calendar import add_event_context, create_calendar_event
from app.services.conversations import create_conversation, segment_conversation
from app.services.extraction import run_event_extraction, run_segment_extraction


DEFAULT_USER_ID = "demo-user"

DEMO_TRANSCRIPT = "\n".join(
    [
        "Sarah: Can we sync on Thursday at 3pm about the venue?",
        "Joel: I'll send the draft budget tonight.",
        "Sarah: Did the caterer reply yet?",
        "Joel: Not yet, I'm stuck waiting on their quote.",
        "Sarah: Let's go with the smaller hall then.",
        "Joel: Follow up with Dana next week about the deposit.",
    ]
)

DEMO_EVENT_NOTE = "We will share the floor plan with Dana. Still waiting to check the caterer quote; the delay is a concern."


def reset_user(db, user_id: str) -> None:
    """Remove existing records owned by the demo user."""

    db.execute(delete(Signal).where(Signal.user_id == user_id))
    db.execute(delete(CandidateWeight).where(CandidateWeight.user_id == user_id))
    db.execute(delete(SignalCandidate).where(SignalCandidate.user_id == user_id))
    db.execute(delete(ExtractionRun).where(ExtractionRun.user_id == user_id))
    db.execute(delete(CalendarEvent).where(CalendarEvent.user_id == user_id))
    db.execute(delete(RawConversation).where(RawConversation.user_id == user_id))
    db.commit()


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed a demo conversation and event and run extraction.")
    parser.add_argument(
        "--user-id",
        default=DEFAULT_USER_ID,
        help=f"Owner of the seeded records (default: {DEFAULT_USER_ID})",
    )
    parser.add_argument(
        "--no-reset",
        action="store_true",
        help="Do not delete existing records for the user before seeding.",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print a short summary."""

    args = parse_args()
    user_id: str = args.user_id

    with SessionLocal() as db:
        if not args.no_reset:
            reset_user(db, user_id)

        conversation = create_conversation(
            db,
            user_id,
            ConversationCreate(title="Venue planning", raw_text=DEMO_TRANSCRIPT, source="paste"),
        )
        segments = segment_conversation(db, user_id, conversation.id)
        segment_results = [run_segment_extraction(db, user_id, segment.id) for segment in segments]

        event = create_calendar_event(
            db,
            user_id,
            CalendarEventCreate(
                title="Venue walkthrough",
                starts_at=datetime(2026, 10, 22, 15, 0, tzinfo=timezone.utc),
                attendees=["Dana", "Joel"],
            ),
        )
        add_event_context(db, user_id, event.id, EventContextCreate(content=DEMO_EVENT_NOTE))
        event_result = run_event_extraction(db, user_id, event.id)
        conversation_id = conversation.id
        event_id = event.id

    print("Seed complete")
    print(f"user_id={user_id}")
    print(f"conversation_id={conversation_id}")
    print(f"segments_created={len(segments)}")
    print(f"segment_candidates={sum(result.candidates_generated for result in segment_results)}")
    print(f"event_id={event_id}")
    print(f"event_candidates={event_result.candidates_generated}")
    print()
    print("Inspect (with header X-User-Id):")
    print(f"  GET /conversations/{conversation_id}/segments")
    print("  GET /candidates")
    print(f"  GET /runs?conversation_id={conversation_id}")


if __name__ == "__main__":
    main()
