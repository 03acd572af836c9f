"""Integration tests for the candidate review state machine and weights."""

from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models.base import Base
from app.models.candidate_weight import CandidateWeight
from app.models.signal import Signal
from app.models.signal_candidate import SignalCandidate
from app.schemas.candidate import CandidateReviewRequest, CandidateWeightRequest
from app.services.errors import ConflictError, InvalidRequestError, StorageError, UnitNotFoundError
from app.services.listings import list_candidates, list_signals
from app.services.review import accept_candidate, review_candidate
from app.services.weights import save_candidate_weights

USER_ID = "user-a"
LATER = datetime(2026, 11, 1, 9, 0, tzinfo=timezone.utc)


class CandidateReviewTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: Session = self.SessionLocal()
        self.db.execute(delete(Signal))
        self.db.execute(delete(CandidateWeight))
        self.db.execute(delete(SignalCandidate))
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def _candidate(self, *, user_id: str = USER_ID, review_status: str = "pending") -> int:
        candidate = SignalCandidate(
            user_id=user_id,
            signal_type="promise",
            label="Commitment made",
            description="A commitment/affirmation is present. Track as a promise or agreed next action.",
            confidence_level="explicit",
            risk_of_misinterpretation="low",
            source_excerpt="Joel: Yes, I'll call you tomorrow",
            constraint_type="none",
            trust_evidence="Message by Joel",
            action_suggested=True,
            related_themes_json=["commitment"],
            source_conversation_id=7,
            segment_id=11,
            extraction_run_id=3,
            review_status=review_status,
        )
        self.db.add(candidate)
        self.db.commit()
        return candidate.id

    def _review(self, candidate_id: int, **payload) -> object:
        return review_candidate(self.db, USER_ID, candidate_id, CandidateReviewRequest(**payload))

    def _candidate_row(self, candidate_id: int) -> SignalCandidate:
        self.db.expire_all()
        candidate = self.db.scalar(select(SignalCandidate).where(SignalCandidate.id == candidate_id))
        assert candidate is not None
        return candidate

    def _signal_count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(Signal))

    def test_accept_creates_signal_from_candidate(self) -> None:
        candidate_id = self._candidate()

        result = self._review(candidate_id, action="accept", user_notes="Remember this")

        self.assertEqual(result.status, "accepted")
        self.assertFalse(result.already_existed)
        signal = self.db.scalar(select(Signal).where(Signal.id == result.signal_id))
        assert signal is not None
        self.assertEqual(signal.approved_from_candidate_id, candidate_id)
        self.assertEqual(signal.label, "Commitment made")
        self.assertEqual(signal.signal_type, "promise")
        self.assertEqual(signal.trust_evidence, "Message by Joel")
        self.assertEqual(signal.source_excerpt, "Joel: Yes, I'll call you tomorrow")
        self.assertEqual(signal.source_segment_id, 11)
        self.assertEqual(signal.extraction_run_id, 3)
        self.assertEqual(signal.status, "open")
        self.assertEqual(signal.user_notes, "Remember this")
        self.assertFalse(signal.action_required)
        self.assertIsNone(signal.weights_json)

        candidate = self._candidate_row(candidate_id)
        self.assertEqual(candidate.review_status, "accepted")
        self.assertEqual(candidate.promotion_status, "promoted")
        self.assertEqual(candidate.reviewed_by, USER_ID)
        self.assertIsNotNone(candidate.reviewed_at)

    def test_accept_replay_returns_existing_signal(self) -> None:
        candidate_id = self._candidate()
        first = self._review(candidate_id, action="accept")

        second = self._review(candidate_id, action="accept")

        self.assertTrue(second.already_existed)
        self.assertEqual(second.signal_id, first.signal_id)
        self.assertEqual(self._signal_count(), 1)

    def test_failed_status_update_after_signal_is_reconciled_on_retry(self) -> None:
        candidate_id = self._candidate()

        with patch(
            "app.services.review._mark_candidate_accepted",
            side_effect=SQLAlchemyError("connection reset"),
        ):
            first = self._review(candidate_id, action="accept")

        self.assertEqual(first.status, "accepted")
        self.assertFalse(first.already_existed)
        self.assertEqual(self._candidate_row(candidate_id).review_status, "pending")

        second = self._review(candidate_id, action="accept")

        self.assertTrue(second.already_existed)
        self.assertEqual(second.signal_id, first.signal_id)
        self.assertEqual(self._signal_count(), 1)
        self.assertEqual(self._candidate_row(candidate_id).review_status, "accepted")

    def test_signal_insert_failure_leaves_candidate_pending(self) -> None:
        candidate_id = self._candidate()

        with patch("app.services.review._insert_signal", side_effect=SQLAlchemyError("disk full")):
            with self.assertRaises(StorageError):
                self._review(candidate_id, action="accept")

        self.assertEqual(self._signal_count(), 0)
        self.assertEqual(self._candidate_row(candidate_id).review_status, "pending")

    def test_integrity_error_without_concurrent_signal_is_chained(self) -> None:
        candidate_id = self._candidate()
        duplicate = IntegrityError("INSERT INTO signals", {}, Exception("UNIQUE constraint failed"))

        with patch("app.services.review._insert_signal", side_effect=duplicate):
            with self.assertRaises(StorageError) as ctx:
                self._review(candidate_id, action="accept")

        self.assertIs(ctx.exception.__cause__, duplicate)
        self.assertEqual(self._candidate_row(candidate_id).review_status, "pending")

    def test_elevated_is_an_explicit_gesture(self) -> None:
        plain = accept_candidate(self.db, USER_ID, self._candidate())
        top_level = accept_candidate(self.db, USER_ID, self._candidate(), elevated=True)
        nested = accept_candidate(
            self.db, USER_ID, self._candidate(), reflection_data={"elevated": True, "note": "keep"}
        )

        flags = {
            signal.id: signal.action_required
            for signal in self.db.scalars(select(Signal)).all()
        }
        self.assertFalse(flags[plain.signal_id])
        self.assertTrue(flags[top_level.signal_id])
        self.assertTrue(flags[nested.signal_id])
        stored = self.db.scalar(select(Signal).where(Signal.id == nested.signal_id))
        assert stored is not None
        self.assertEqual(stored.reflection_data_json, {"elevated": True, "note": "keep"})

    def test_reviewed_candidates_refuse_further_actions(self) -> None:
        rejected = self._candidate()
        self._review(rejected, action="reject", review_notes="not relevant")

        for payload in (
            {"action": "accept"},
            {"action": "reject"},
            {"action": "defer", "deferred_until": LATER},
            {"action": "edit", "updates": {"label": "New label"}},
        ):
            with self.assertRaises(ConflictError):
                self._review(rejected, **payload)
        self.assertEqual(self._signal_count(), 0)

        accepted = self._candidate()
        self._review(accepted, action="accept")
        with self.assertRaises(ConflictError):
            self._review(accepted, action="reject")

    def test_reviewed_candidates_conflict_before_payload_checks(self) -> None:
        rejected = self._candidate()
        self._review(rejected, action="reject")
        accepted = self._candidate()
        self._review(accepted, action="accept")

        for candidate_id in (rejected, accepted):
            for payload in (
                {"action": "edit", "updates": {}},
                {"action": "edit", "updates": {"label": "abc"}},
                {"action": "edit", "updates": {"review_status": "pending"}},
                {"action": "defer"},
            ):
                with self.subTest(candidate_id=candidate_id, payload=payload):
                    with self.assertRaises(ConflictError):
                        self._review(candidate_id, **payload)

    def test_reject_records_review_metadata(self) -> None:
        candidate_id = self._candidate()

        result = self._review(candidate_id, action="reject", review_notes="not relevant")

        self.assertEqual(result.status, "rejected")
        candidate = self._candidate_row(candidate_id)
        self.assertEqual(candidate.review_status, "rejected")
        self.assertEqual(candidate.review_notes, "not relevant")
        self.assertEqual(candidate.reviewed_by, USER_ID)

    def test_defer_requires_a_timestamp(self) -> None:
        candidate_id = self._candidate()

        with self.assertRaises(InvalidRequestError) as ctx:
            self._review(candidate_id, action="defer")

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self._candidate_row(candidate_id).review_status, "pending")

    def test_deferred_candidate_can_still_be_accepted(self) -> None:
        candidate_id = self._candidate()

        deferred = self._review(candidate_id, action="defer", deferred_until=LATER)

        self.assertEqual(deferred.status, "deferred")
        self.assertEqual(deferred.deferred_until, LATER)
        candidate = self._candidate_row(candidate_id)
        self.assertEqual(candidate.review_status, "deferred")
        self.assertIsNotNone(candidate.deferred_until)

        accepted = self._review(candidate_id, action="accept")
        self.assertEqual(accepted.status, "accepted")

    def test_edit_changes_allowed_fields_only(self) -> None:
        candidate_id = self._candidate()

        result = self._review(
            candidate_id,
            action="edit",
            updates={
                "label": "Call Joel back",
                "confidence_level": "inferred",
                "related_themes": ["calls"],
                "action_suggested": False,
            },
        )

        self.assertEqual(result.status, "updated")
        candidate = self._candidate_row(candidate_id)
        self.assertEqual(candidate.label, "Call Joel back")
        self.assertEqual(candidate.confidence_level, "inferred")
        self.assertEqual(candidate.related_themes_json, ["calls"])
        self.assertFalse(candidate.action_suggested)
        self.assertEqual(candidate.review_status, "pending")

    def test_edit_rejects_empty_unknown_and_invalid_updates(self) -> None:
        candidate_id = self._candidate()

        for updates in (
            {},
            {"review_status": "accepted"},
            {"signal_type": "warning"},
            {"confidence_level": "certain"},
            {"label": "Abc"},
        ):
            with self.assertRaises(InvalidRequestError):
                self._review(candidate_id, action="edit", updates=updates)

        candidate = self._candidate_row(candidate_id)
        self.assertEqual(candidate.label, "Commitment made")
        self.assertEqual(candidate.review_status, "pending")

    def test_edit_cannot_clear_description(self) -> None:
        candidate_id = self._candidate()

        with self.assertRaises(InvalidRequestError) as ctx:
            self._review(candidate_id, action="edit", updates={"description": None})

        self.assertEqual(ctx.exception.details, ["description must be 10-500 characters"])
        self.assertIsNotNone(self._candidate_row(candidate_id).description)

    def test_other_users_candidate_is_not_found(self) -> None:
        candidate_id = self._candidate(user_id="user-b")

        with self.assertRaises(UnitNotFoundError):
            self._review(candidate_id, action="accept")
        with self.assertRaises(UnitNotFoundError):
            self._review(candidate_id, action="defer")
        with self.assertRaises(UnitNotFoundError):
            self._review(candidate_id, action="edit", updates={})
        with self.assertRaises(UnitNotFoundError):
            save_candidate_weights(self.db, USER_ID, candidate_id, CandidateWeightRequest(relevance=2))

    def test_weights_upsert_and_are_copied_on_accept(self) -> None:
        candidate_id = self._candidate()

        save_candidate_weights(self.db, USER_ID, candidate_id, CandidateWeightRequest(relevance=2))
        weight = save_candidate_weights(
            self.db,
            USER_ID,
            candidate_id,
            CandidateWeightRequest(relevance=4, importance=5, energy_impact=-2, confidence="High", action_timing="now"),
        )

        self.assertEqual(weight.relevance, 4)
        self.assertEqual(self.db.scalar(select(func.count()).select_from(CandidateWeight)), 1)
        self.assertEqual(self._candidate_row(candidate_id).review_status, "pending")

        result = accept_candidate(self.db, USER_ID, candidate_id)

        signal = self.db.scalar(select(Signal).where(Signal.id == result.signal_id))
        assert signal is not None
        self.assertEqual(
            signal.weights_json,
            {
                "relevance": 4,
                "importance": 5,
                "energy_impact": -2,
                "confidence": "High",
                "action_timing": "now",
                "notes": None,
            },
        )

    def test_listings_filter_by_owner_and_status(self) -> None:
        pending = self._candidate()
        accepted = self._candidate()
        self._candidate(user_id="user-b")
        self._review(accepted, action="accept")

        self.assertEqual([c.id for c in list_candidates(self.db, USER_ID)], [pending, accepted])
        self.assertEqual([c.id for c in list_candidates(self.db, USER_ID, review_status="pending")], [pending])
        self.assertEqual(len(list_signals(self.db, USER_ID, status="open")), 1)
        self.assertEqual(list_signals(self.db, "user-b"), [])


if __name__ == "__main__":
    unittest.main()
