"""Common schemas used across the API."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


class PaginationMeta(BaseModel):
    """Laravel-style pagination metadata returned by the backend."""

    current_page: int = 1
    per_page: int = 10
    total: int = 0
    last_page: int = 1
    from_: int | None = Field(default=0, alias="from")
    to: int | None = 0

    model_config = {"populate_by_name": True}


class Page(BaseModel, Generic[T]):
    """One page of a backend list query."""

    data: list[T] = Field(default_factory=list)
    pagination: PaginationMeta = Field(default_factory=PaginationMeta)
