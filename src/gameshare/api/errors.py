"""Exception handlers mapping domain and validation errors to responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gameshare.errors import ServiceError
from gameshare.schemas import ErrorResponse

logger = logging.getLogger(__name__)

# Pydantic error types reported as out-of-range input (414) rather than bad input (400)
OUT_OF_RANGE_ERRORS = {
    "string_too_long",
    "string_too_short",
    "too_long",
    "too_short",
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
}


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages)


async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    """Render a ServiceError with its own status code."""
    logger.info(f"{exc.code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.detail, code=exc.code).model_dump(),
    )


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures.

    Missing fields are 400, length/range violations 414, anything else 400.
    """
    error_types = {error.get("type") for error in exc.errors()}

    if "missing" in error_types:
        status_code, code = status.HTTP_400_BAD_REQUEST, "MISSING_FIELD"
    elif error_types & OUT_OF_RANGE_ERRORS:
        status_code, code = 414, "OUT_OF_RANGE"
    else:
        status_code, code = status.HTTP_400_BAD_REQUEST, "INVALID_INPUT"

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=_format_validation_errors(exc), code=code).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application."""
    app.add_exception_handler(ServiceError, service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
