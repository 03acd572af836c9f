"""Fail-closed validation of extractor and mapper output.

The vocabulary guard runs first, over the whole serialized response, and
forces ``status='failed'``. Shape and field problems are data-quality defects
and yield ``status='partial'``. Either way the run is rejected as a whole.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from app.extraction.types import CONFIDENCE_LEVELS, RISK_LEVELS, RUN_STATUSES, SIGNAL_TYPES, ValidationResult
from app.extraction.vocabulary import MatchMode, VocabularyGuard, observational_guard, ranking_guard

BASE_REQUIRED_FIELDS: tuple[str, ...] = (
    "signal_type",
    "label",
    "description",
    "confidence_level",
    "excerpt",
    "risk_of_misinterpretation",
)
SEGMENT_REQUIRED_FIELDS: tuple[str, ...] = (*BASE_REQUIRED_FIELDS, "why_surfaced", "ambiguity_note")

# Closed vocabularies are checked by membership, so the guard does not read them.
_CANDIDATE_ENUM_FIELDS: dict[str, tuple[str, ...]] = {
    "signal_type": SIGNAL_TYPES,
    "confidence_level": CONFIDENCE_LEVELS,
    "risk_of_misinterpretation": RISK_LEVELS,
}
READINESS_QUALITIES: tuple[str, ...] = ("low", "medium", "high")

LABEL_LENGTH = (5, 100)
DESCRIPTION_LENGTH = (10, 500)
_LENGTH_BOUNDS: dict[str, tuple[int, int]] = {"label": LABEL_LENGTH, "description": DESCRIPTION_LENGTH}


@dataclass(frozen=True, slots=True)
class ResponseValidator:
    """Validate ``{status, candidates[], errors[]}`` extraction responses."""

    guard: VocabularyGuard
    required_fields: tuple[str, ...] = SEGMENT_REQUIRED_FIELDS

    def validate(self, response: Any) -> ValidationResult:
        if not isinstance(response, Mapping):
            return ValidationResult(
                valid=False,
                status="failed",
                errors=["Response must be a JSON object"],
                error_type="invalid_json",
            )

        term = self.guard.find_in_payload(_mask_enum_values(response))
        if term is not None:
            return _forbidden(term)

        errors: list[str] = []
        if response.get("status") not in RUN_STATUSES:
            errors.append("Missing or invalid status field")
        candidates = response.get("candidates")
        if not isinstance(candidates, list):
            errors.append("candidates must be an array")
        if not isinstance(response.get("errors"), list):
            errors.append("errors must be an array")

        if isinstance(candidates, list):
            for index, candidate in enumerate(candidates, start=1):
                errors.extend(self._candidate_errors(f"Candidate {index}:", candidate))

        if errors:
            return ValidationResult(
                valid=False,
                status="partial",
                errors=errors,
                error_type="missing_required_fields",
            )
        return ValidationResult(valid=True, status="success")

    def _candidate_errors(self, prefix: str, candidate: Any) -> list[str]:
        if not isinstance(candidate, Mapping):
            return [f"{prefix} must be an object"]

        errors: list[str] = []
        for name in self.required_fields:
            value = candidate.get(name)
            if value is None or value == "":
                errors.append(f"{prefix} Missing required field '{name}'")
            elif name in _LENGTH_BOUNDS:
                errors.extend(_length_error(prefix, name, value, _LENGTH_BOUNDS[name]))
            elif not isinstance(value, str):
                errors.append(f"{prefix} {name} must be a string")
            elif name in _CANDIDATE_ENUM_FIELDS and value not in _CANDIDATE_ENUM_FIELDS[name]:
                errors.append(f"{prefix} Invalid {name} '{value}'")

        excerpt = candidate.get("excerpt")
        if isinstance(excerpt, str) and excerpt and not excerpt.strip():
            errors.append(f"{prefix} excerpt cannot be empty")
        return errors


def validate_map_response(data: Any, guard: VocabularyGuard) -> ValidationResult:
    """Validate a conversation map; structural only, never ranked."""

    if not isinstance(data, Mapping):
        return ValidationResult(valid=False, status="failed", errors=["Invalid JSON object"], error_type="invalid_json")

    readiness = data.get("readiness")
    masked = dict(data)
    if isinstance(readiness, Mapping):
        masked["readiness"] = {key: value for key, value in readiness.items() if key != "quality"}
    term = guard.find_in_payload(masked)
    if term is not None:
        return _forbidden(term)

    errors = [
        f"Missing {name} array"
        for name in ("participants", "themes", "phases", "guardrails")
        if not isinstance(data.get(name), list)
    ]
    if not isinstance(readiness, Mapping):
        errors.append("Missing readiness object")
    elif readiness.get("quality") not in READINESS_QUALITIES:
        errors.append("Invalid readiness quality")

    if errors:
        return ValidationResult(valid=False, status="partial", errors=errors, error_type="missing_required_fields")
    return ValidationResult(valid=True, status="success")


def build_segment_validator(match_mode: MatchMode = "substring") -> ResponseValidator:
    return ResponseValidator(guard=ranking_guard(match_mode), required_fields=SEGMENT_REQUIRED_FIELDS)


def build_event_validator(match_mode: MatchMode = "substring") -> ResponseValidator:
    return ResponseValidator(guard=observational_guard(match_mode), required_fields=BASE_REQUIRED_FIELDS)


def _forbidden(term: str) -> ValidationResult:
    return ValidationResult(
        valid=False,
        status="failed",
        errors=[f'Forbidden term detected: "{term}". Ranking or scoring language is not allowed.'],
        error_type="forbidden_content",
    )


def _length_error(prefix: str, name: str, value: Any, bounds: Sequence[int]) -> list[str]:
    if not isinstance(value, str):
        return [f"{prefix} {name} must be a string"]
    low, high = bounds
    if low <= len(value) <= high:
        return []
    return [f"{prefix} {name} must be {low}-{high} characters"]


def _mask_enum_values(response: Mapping[str, Any]) -> dict[str, Any]:
    masked: dict[str, Any] = {key: value for key, value in response.items() if key != "status"}
    candidates = response.get("candidates")
    if isinstance(candidates, list):
        masked["candidates"] = [
            {key: value for key, value in candidate.items() if key not in _CANDIDATE_ENUM_FIELDS}
            if isinstance(candidate, Mapping)
            else candidate
            for candidate in candidates
        ]
    return masked
