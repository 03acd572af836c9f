"""Common API response schemas."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Consistent JSON envelope for API responses."""

    data: T


class ErrorDetail(BaseModel):
    """Classified failure carried in the ``detail`` of an error response."""

    error: str
    error_type: str
    details: list[str] | None = None
    ai_run_id: int | None = None


class ErrorResponse(BaseModel):
    detail: ErrorDetail
