"""
JSON response helpers mapping errors to HTTP statuses.
"""

from typing import Any

from django.http import JsonResponse

from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    AuthError,
    ConflictError,
    NotFoundError,
    OutreachError,
    PersistenceError,
)
from .serializers import ErrorResponse, ValidationErrorDetail, ValidationErrorResponse

ERROR_STATUS: list[tuple[type[OutreachError], int]] = [
    (AuthError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PersistenceError, 500),
]


def json_response(data: dict[str, Any], status: int = 200) -> JsonResponse:
    """Create a JSON response."""
    return JsonResponse(data, status=status)


def error_response(exc: OutreachError) -> JsonResponse:
    """Map a domain error onto its HTTP status."""
    status = next(
        (code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)),
        502,
    )
    return json_response(
        ErrorResponse(error=exc.message).model_dump(mode="json"), status=status
    )


def validation_error_response(exc: PydanticValidationError) -> JsonResponse:
    """400 response listing every field that failed validation."""
    details = [
        ValidationErrorDetail(
            field=".".join(str(part) for part in error["loc"]) or "body",
            message=error["msg"],
        )
        for error in exc.errors()
    ]
    response = ValidationErrorResponse(error="validation_error", details=details)
    return json_response(response.model_dump(mode="json"), status=400)


def bad_request(message: str) -> JsonResponse:
    """400 response for malformed requests that never reached validation."""
    return json_response(
        ErrorResponse(error=message).model_dump(mode="json"), status=400
    )
