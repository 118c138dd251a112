from typing import Optional, TypeVar

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from triprate.services.validation import ValidationResult

logger = logging.getLogger("triprate.errors")

# Starlette renamed the 422 constant; the literal works across releases.
HTTP_422_UNPROCESSABLE = 422

_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_404_NOT_FOUND: "not_found",
    HTTP_422_UNPROCESSABLE: "validation_error",
}

T = TypeVar("T")


def reject_invalid(result: ValidationResult) -> None:
    """Turn a failed validation into a 422 carrying the user-facing message."""
    if not result:
        raise HTTPException(status_code=HTTP_422_UNPROCESSABLE, detail=result.message)


def require_valid(result: ValidationResult, record: Optional[T]) -> T:
    """Return the record built from input that passed validation, else 422."""
    reject_invalid(result)
    if record is None:
        raise HTTPException(status_code=HTTP_422_UNPROCESSABLE, detail="invalid input")
    return record


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    detail = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
        detail = f"No route for {request.method} {request.url.path}"
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": _ERROR_CODES.get(exc.status_code, "http_error"),
            "detail": detail,
        },
        headers=getattr(exc, "headers", None),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
