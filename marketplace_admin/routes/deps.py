"""Shared route dependencies and error responses."""

from typing import Any

from fastapi import Header
from fastapi.responses import JSONResponse

from marketplace_admin.schemas import ErrorDetail, ErrorResponse
from marketplace_admin.services.backend_client import MarketplaceClient


def get_backend(authorization: str | None = Header(default=None)) -> MarketplaceClient:
    """Backend client acting with the caller's bearer token (if any)."""
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    return MarketplaceClient(token=token)


def error_response(status_code: int, code: str, message: str, detail: dict[str, Any] | None = None) -> JSONResponse:
    """Structured error envelope: { "error": { code, message, detail } }."""
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def validation_failed(errors: dict[str, Any], message: str = "Please correct the highlighted fields") -> JSONResponse:
    """422 response carrying field-level validation errors."""
    return error_response(422, "VALIDATION_ERROR", message, {"errors": errors})
