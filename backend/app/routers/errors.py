"""Translate service errors into HTTP errors."""

from typing import Any

from fastapi import HTTPException

from app.schemas.common import ErrorDetail, ErrorResponse
from app.services.errors import ReflectionError

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status_code: {"model": ErrorResponse} for status_code in (400, 401, 404, 409, 500)
}


def as_http_exception(exc: ReflectionError) -> HTTPException:
    """Keep the classification and audit run id visible to the caller."""

    detail = ErrorDetail(
        error=exc.message,
        error_type=exc.error_type,
        details=exc.details or None,
        ai_run_id=exc.ai_run_id,
    )
    return HTTPException(status_code=exc.status_code, detail=detail.model_dump(exclude_none=True))
