"""
Standard API response models and helpers for consistent response formatting.

All endpoints use these helpers so the envelopes stay uniform:
- Success: { "success": true, "data": <payload>, "meta": {...} }
- Error: { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }
"""
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Error code (e.g., 'insufficient_funds', 'query_failed')")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload (pydantic models are dumped by alias)
        meta: Optional metadata (limit, counts, ...)

    Returns:
        dict: { "success": true, "data": <data>, "meta": <meta> }
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [
            item.model_dump(mode="json", by_alias=True) if isinstance(item, BaseModel) else item
            for item in data
        ]
    response = {"success": True, "data": data}
    if meta:
        response["meta"] = meta
    return response


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the error envelope; validated through StandardErrorResponse."""
    envelope = StandardErrorResponse(error=ErrorDetail(code=code, message=message, details=details or None))
    return envelope.model_dump()


# Documented on value-moving and read routes that surface core errors
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": StandardErrorResponse, "description": "Missing or invalid request fields"},
    500: {"model": StandardErrorResponse, "description": "Ledger or domain error (see error.code)"},
}
