"""Tests for the deterministic transcript extractor."""

from __future__ import annotations

import unittest

from app.extraction.heuristic_extractor import HeuristicSignalExtractor, is_commitment


def _labels(drafts) -> list[str]:
    return [draft.label for draft in drafts]


class HeuristicSignalExtractorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.extractor = HeuristicSignalExtractor()

    def test_single_line_fires_rules_in_table_order(self) -> None:
        drafts = self.extractor.extract("Sarah: Can we sync on Thursday at 3pm?")

        self.assertEqual(
            _labels(drafts),
            ["Scheduling / coordination", "Follow-up loop", "Open question / request", "Context anchor"],
        )
        scheduling = drafts[0]
        self.assertEqual(scheduling.signal_type, "opportunity")
        self.assertEqual(scheduling.confidence_level, "explicit")
        self.assertEqual(scheduling.risk_of_misinterpretation, "low")
        self.assertEqual(scheduling.trust_evidence, "Message by Sarah")
        self.assertEqual(scheduling.excerpt, "Sarah: Can we sync on Thursday at 3pm?")
        self.assertTrue(scheduling.action_suggested)
        self.assertEqual(drafts[2].signal_type, "insight")
        self.assertEqual(drafts[2].risk_of_misinterpretation, "medium")

    def test_affirmation_without_plan_is_not_a_commitment(self) -> None:
        self.assertFalse(is_commitment("Yes we can"))
        self.assertTrue(is_commitment("Yes, I'll call you tomorrow"))

        drafts = self.extractor.extract("08/09/17, 9:12 am - Joel: Yes we can")

        self.assertNotIn("Commitment made", _labels(drafts))
        self.assertIn("Open question / request", _labels(drafts))
        self.assertEqual(drafts[0].trust_evidence, "Message by Joel")

    def test_commitment_tied_to_time_is_a_promise(self) -> None:
        drafts = self.extractor.extract("Joel: Yes, I'll call you tomorrow")

        promise = next(draft for draft in drafts if draft.label == "Commitment made")
        self.assertEqual(promise.signal_type, "promise")

    def test_duplicate_lines_are_deduplicated(self) -> None:
        drafts = self.extractor.extract("Sarah: sync tomorrow\nSarah: sync tomorrow")

        self.assertEqual(_labels(drafts), ["Scheduling / coordination", "Follow-up loop"])

    def test_cue_free_transcript_falls_back_to_context_anchors(self) -> None:
        text = "\n".join(f"Line {index} of the garden diary, green and quiet" for index in range(20))

        drafts = self.extractor.extract(text)

        self.assertEqual(len(drafts), 8)
        for index, draft in enumerate(drafts):
            self.assertEqual(draft.label, "Context anchor")
            self.assertEqual(draft.signal_type, "insight")
            self.assertEqual(draft.confidence_level, "inferred")
            self.assertEqual(draft.risk_of_misinterpretation, "high")
            self.assertFalse(draft.action_suggested)
            self.assertEqual(draft.excerpt, f"Line {index} of the garden diary, green and quiet")

    def test_output_is_capped(self) -> None:
        text = "\n".join(f"Sarah: Can we sync on Thursday, round {index}?" for index in range(20))

        drafts = self.extractor.extract(text)

        self.assertEqual(len(drafts), 15)
        self.assertTrue(all(draft.label == "Scheduling / coordination" for draft in drafts))

    def test_only_leading_lines_are_scanned(self) -> None:
        text = "\n".join(["ok"] * 85 + ["Sarah: sync tomorrow please"])

        self.assertEqual(self.extractor.extract(text), [])

    def test_short_messages_below_rule_minimum_are_ignored(self) -> None:
        self.assertEqual(self.extractor.extract("A1: 9am"), [])

    def test_long_excerpts_are_clamped(self) -> None:
        drafts = self.extractor.extract("Sarah: sync tomorrow " + "x" * 400)

        self.assertEqual(len(drafts[0].excerpt), 220)
        self.assertTrue(drafts[0].excerpt.endswith("…"))

    def test_model_name_is_configurable(self) -> None:
        self.assertEqual(HeuristicSignalExtractor(model_name="heuristic-v1").model_name, "heuristic-v1")


if __name__ == "__main__":
    unittest.main()
