"""Tests for the forbidden-vocabulary guard."""

from __future__ import annotations

import unittest

from app.extraction.vocabulary import (
    OBSERVATIONAL_TERMS,
    RANKING_TERMS,
    VocabularyGuard,
    observational_guard,
    ranking_guard,
)


class VocabularyGuardTests(unittest.TestCase):
    def test_substring_mode_catches_embedded_terms(self) -> None:
        guard = ranking_guard()

        self.assertEqual(guard.find_term("The team reprioritised; PRIORITY changed"), "priority")
        self.assertEqual(guard.find_term("Frank said hello"), "rank")
        self.assertIsNone(guard.find_term("Let's sync tomorrow"))

    def test_word_mode_only_matches_whole_words(self) -> None:
        guard = ranking_guard("word")

        self.assertIsNone(guard.find_term("Frank said hello"))
        self.assertEqual(guard.find_term("what is the rank of this"), "rank")
        self.assertEqual(guard.find_term("This is the Top Insight here"), "top insight")

    def test_payload_scan_covers_nested_free_text(self) -> None:
        guard = ranking_guard()
        payload = {"candidates": [{"label": "Follow-up loop", "why_surfaced": "urgent follow-up detected"}]}

        self.assertEqual(guard.find_in_payload(payload), "urgent")

    def test_observational_policy_is_wider(self) -> None:
        self.assertIsNone(ranking_guard().find_term("this is critical"))
        self.assertEqual(observational_guard().find_term("this is critical"), "critical")
        self.assertTrue(set(RANKING_TERMS) - {"top insight", "recommended action"} <= set(OBSERVATIONAL_TERMS))

    def test_guard_is_immutable(self) -> None:
        guard = VocabularyGuard(terms=("rank",))

        with self.assertRaises(Exception):
            guard.terms = ("other",)  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
