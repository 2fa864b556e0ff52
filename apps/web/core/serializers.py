"""
Pydantic schemas shared by all JSON API error responses.
"""

from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Response for domain errors (auth, not found, conflict, persistence)."""

    success: Literal[False] = False
    error: str


class ValidationErrorDetail(BaseModel):
    """A single validation error."""

    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Response for validation errors."""

    error: Literal["validation_error"]
    details: list[ValidationErrorDetail]
