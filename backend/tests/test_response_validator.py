"""Tests for fail-closed response and map validation."""

from __future__ import annotations

import unittest
from typing import Any

from app.extraction.conversation_map import build_conversation_map
from app.extraction.validator import build_event_validator, build_segment_validator, validate_map_response
from app.extraction.vocabulary import ranking_guard


def _candidate(**overrides: Any) -> dict[str, Any]:
    candidate: dict[str, Any] = {
        "signal_type": "pattern",
        "label": "Follow-up loop",
        "description": "There is an explicit follow-up loop in this exchange.",
        "confidence_level": "explicit",
        "excerpt": "Sarah: sync tomorrow",
        "risk_of_misinterpretation": "low",
        "why_surfaced": "Detected follow-up vocabulary.",
        "ambiguity_note": "Could be a courtesy closing.",
    }
    candidate.update(overrides)
    return candidate


def _response(*candidates: dict[str, Any]) -> dict[str, Any]:
    return {"status": "success", "candidates": list(candidates), "errors": []}


class ResponseValidatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = build_segment_validator()

    def test_well_formed_response_is_valid(self) -> None:
        result = self.validator.validate(_response(_candidate()))

        self.assertTrue(result.valid)
        self.assertEqual(result.status, "success")
        self.assertIsNone(result.error_type)

    def test_empty_candidate_list_is_valid(self) -> None:
        self.assertTrue(self.validator.validate(_response()).valid)

    def test_non_object_is_invalid_json(self) -> None:
        for response in (None, [], "text"):
            result = self.validator.validate(response)
            self.assertFalse(result.valid)
            self.assertEqual(result.status, "failed")
            self.assertEqual(result.error_type, "invalid_json")

    def test_forbidden_term_in_free_text_fails_the_whole_response(self) -> None:
        result = self.validator.validate(
            _response(_candidate(), _candidate(why_surfaced="This looked urgent to me.", label="Abc"))
        )

        self.assertFalse(result.valid)
        self.assertEqual(result.status, "failed")
        self.assertEqual(result.error_type, "forbidden_content")
        self.assertEqual(len(result.errors), 1)
        self.assertIn("urgent", result.errors[0])

    def test_label_length_boundary(self) -> None:
        too_short = self.validator.validate(_response(_candidate(label="Abcd")))
        just_right = self.validator.validate(_response(_candidate(label="Abcde")))

        self.assertEqual(too_short.status, "partial")
        self.assertEqual(too_short.error_type, "missing_required_fields")
        self.assertIn("Candidate 1: label must be 5-100 characters", too_short.errors)
        self.assertTrue(just_right.valid)

    def test_label_upper_length_boundary(self) -> None:
        at_limit = self.validator.validate(_response(_candidate(label="a" * 100)))
        over_limit = self.validator.validate(_response(_candidate(label="a" * 101)))

        self.assertTrue(at_limit.valid, at_limit.errors)
        self.assertEqual(over_limit.status, "partial")
        self.assertEqual(over_limit.errors, ["Candidate 1: label must be 5-100 characters"])

    def test_description_length_boundaries(self) -> None:
        cases = {9: False, 10: True, 500: True, 501: False}
        for length, expected in cases.items():
            with self.subTest(length=length):
                result = self.validator.validate(_response(_candidate(description="x" * length)))
                self.assertEqual(result.valid, expected, result.errors)
                if not expected:
                    self.assertEqual(result.status, "partial")
                    self.assertEqual(result.errors, ["Candidate 1: description must be 10-500 characters"])

    def test_non_string_text_fields_are_rejected(self) -> None:
        cases = [
            ("label", 12345),
            ("label", True),
            ("description", ["x"]),
            ("excerpt", {"a": 1}),
            ("why_surfaced", 7),
            ("ambiguity_note", ["note"]),
        ]
        for name, value in cases:
            with self.subTest(name=name, value=value):
                result = self.validator.validate(_response(_candidate(**{name: value})))
                self.assertFalse(result.valid)
                self.assertEqual(result.status, "partial")
                self.assertEqual(result.error_type, "missing_required_fields")
                self.assertEqual(result.errors, [f"Candidate 1: {name} must be a string"])

    def test_non_string_enum_value_is_rejected(self) -> None:
        result = self.validator.validate(_response(_candidate(signal_type=["pattern"], confidence_level=1)))

        self.assertEqual(result.status, "partial")
        self.assertEqual(
            result.errors,
            ["Candidate 1: signal_type must be a string", "Candidate 1: confidence_level must be a string"],
        )

    def test_out_of_enum_signal_type_is_a_field_error(self) -> None:
        result = self.validator.validate(_response(_candidate(signal_type="priority")))

        self.assertFalse(result.valid)
        self.assertEqual(result.status, "partial")
        self.assertEqual(result.error_type, "missing_required_fields")
        self.assertIn("Candidate 1: Invalid signal_type 'priority'", result.errors)

    def test_segment_variant_requires_rationale_fields(self) -> None:
        candidate = _candidate()
        del candidate["why_surfaced"]

        segment_result = self.validator.validate(_response(candidate))
        event_result = build_event_validator().validate(_response(candidate))

        self.assertIn("Candidate 1: Missing required field 'why_surfaced'", segment_result.errors)
        self.assertTrue(event_result.valid, event_result.errors)

    def test_shape_errors_are_partial(self) -> None:
        result = self.validator.validate({"status": "done", "candidates": {}, "errors": None})

        self.assertEqual(result.status, "partial")
        self.assertEqual(
            result.errors,
            ["Missing or invalid status field", "candidates must be an array", "errors must be an array"],
        )

    def test_event_variant_uses_observational_terms(self) -> None:
        response = _response(_candidate(description="You should follow up on this thread soon."))

        self.assertTrue(self.validator.validate(response).valid)
        self.assertEqual(build_event_validator().validate(response).error_type, "forbidden_content")

    def test_word_mode_ignores_embedded_terms(self) -> None:
        response = _response(_candidate(excerpt="Frank: sync tomorrow"))

        self.assertEqual(self.validator.validate(response).error_type, "forbidden_content")
        self.assertTrue(build_segment_validator("word").validate(response).valid)


class ConversationMapValidationTests(unittest.TestCase):
    def test_built_map_is_valid(self) -> None:
        data = build_conversation_map("Sarah: Let's meet about the budget\nJoel: sounds good\nSarah: great")

        result = validate_map_response(data, ranking_guard())

        self.assertTrue(result.valid, result.errors)
        self.assertEqual(data["participants"], ["Sarah", "Joel"])
        self.assertEqual(data["themes"], ["General Discussion", "Scheduling", "Financial"])
        self.assertEqual(data["readiness"]["quality"], "high")
        self.assertEqual(data["metadata"]["message_count"], 3)
        self.assertEqual([phase["line_end"] for phase in data["phases"]], [1, 2, 3])

    def test_forbidden_participant_name_fails_map(self) -> None:
        data = build_conversation_map("Frank: hello\nSarah: hi")

        result = validate_map_response(data, ranking_guard())

        self.assertEqual(result.status, "failed")
        self.assertEqual(result.error_type, "forbidden_content")

    def test_missing_arrays_and_bad_quality_are_partial(self) -> None:
        data = build_conversation_map("plain prose without speakers")
        del data["themes"]
        data["readiness"]["quality"] = "priority"

        result = validate_map_response(data, ranking_guard())

        self.assertEqual(result.status, "partial")
        self.assertEqual(result.errors, ["Missing themes array", "Invalid readiness quality"])


if __name__ == "__main__":
    unittest.main()
