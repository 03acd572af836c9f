"""Service-level error taxonomy shared by extraction and review."""

from __future__ import annotations


class ReflectionError(RuntimeError):
    """Base class; carries the classification and the HTTP status it maps to."""

    status_code: int = 500
    error_type: str = "other"

    def __init__(self, message: str, *, details: list[str] | None = None, ai_run_id: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details or [])
        self.ai_run_id = ai_run_id


class InvalidRequestError(ReflectionError):
    status_code = 400
    error_type = "invalid_request"


class UnitNotFoundError(ReflectionError):
    """Record does not exist or is not owned by the caller."""

    status_code = 404
    error_type = "not_found"


class ConflictError(ReflectionError):
    """State-machine guard refused the transition."""

    status_code = 409
    error_type = "conflict"


class ExtractionValidationError(ReflectionError):
    """Output failed validation; the whole batch was rejected."""

    status_code = 422

    def __init__(self, message: str, *, error_type: str, details: list[str], ai_run_id: int | None) -> None:
        super().__init__(message, details=details, ai_run_id=ai_run_id)
        self.error_type = error_type


class AuditWriteError(ReflectionError):
    """The audit record could not be written, so the run is treated as not having happened."""

    error_type = "audit_write_failed"


class StorageError(ReflectionError):
    error_type = "storage_failed"


class ExtractorFailedError(ReflectionError):
    error_type = "extractor_error"
