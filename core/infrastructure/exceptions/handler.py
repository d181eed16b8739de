import traceback
from typing import Any, Dict, List

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..factory import get_data_sanitizer

HTTP_ERROR_MESSAGES = {
    status.HTTP_400_BAD_REQUEST: "Bad request",
    status.HTTP_401_UNAUTHORIZED: "Authentication required",
    status.HTTP_403_FORBIDDEN: "Permission denied",
    status.HTTP_404_NOT_FOUND: "Resource not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "Validation error",
    status.HTTP_429_TOO_MANY_REQUESTS: "Rate limit exceeded",
}


def normalize_error_detail(detail: Any) -> str | List[str]:
    """Normalizes the error detail to a string or list of strings for consistent API responses.

    Args:
        detail: The raw error detail, which can be a string, dictionary, or list.

    Returns:
        A normalized representation of the error detail.
    """
    if isinstance(detail, str):
        return detail

    if isinstance(detail, dict):
        values = [str(value) for value in detail.values()]
        return values[0] if len(values) == 1 else values

    if hasattr(detail, "__iter__"):
        return [str(item) for item in detail]

    return str(detail)


def _validation_errors(exc: Exception) -> Dict[str, str]:
    errors = {}
    for error in exc.errors():
        field = ".".join(str(x) for x in error["loc"])
        errors[field] = error["msg"]
    return errors


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for the FastAPI application.

    Catches framework-level failures that never reach a dispatch rule
    (malformed request bodies, unknown routes, unexpected crashes) and returns
    them in one consistent JSON envelope. Sensitive information is sanitized
    before logging.

    Args:
        request: The incoming FastAPI request object.
        exc: The exception that was caught.

    Returns:
        A `JSONResponse` object with a standardized error format and appropriate HTTP status code.
    """
    exc_type = type(exc).__name__
    sanitizer = await get_data_sanitizer()
    exc_msg = sanitizer.sanitize_exception_for_logging(exc)

    custom_response_data = {
        "success": False,
        "message": "An error occurred",
        "errors": {},
        "status_code": None,
        "path": str(request.url.path),
        "method": request.method,
    }

    if isinstance(
        exc, (ValidationError, RequestValidationError, ResponseValidationError)
    ):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        custom_response_data.update(
            {
                "message": "Validation error",
                "errors": _validation_errors(exc),
            }
        )
        logger.warning(f"📝 {exc_type} on {request.url.path}: {exc_msg}")

    elif isinstance(exc, (HTTPException, StarletteHTTPException)):
        status_code = exc.status_code
        custom_response_data.update(
            {
                "message": HTTP_ERROR_MESSAGES.get(
                    exc.status_code,
                    "Internal server error" if exc.status_code >= 500 else "HTTP error occurred",
                ),
                "errors": {"detail": normalize_error_detail(exc.detail)},
            }
        )

    elif isinstance(exc, ValueError):
        status_code = status.HTTP_400_BAD_REQUEST
        custom_response_data.update(
            {
                "message": "Invalid field items",
                "errors": {"detail": exc_msg},
            }
        )

    else:
        tb = traceback.extract_tb(exc.__traceback__)
        if tb:
            last_frame = tb[-1]
            location = f'File "{last_frame.filename}", line {last_frame.lineno}, in {last_frame.name}'
        else:
            location = "No traceback available"

        logger.critical(
            f"☢️ Unhandled exception -> {exc_type}: {exc_msg}\nLocation: {location}"
        )

        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        custom_response_data.update(
            {
                "message": "Internal server error",
                "errors": {"detail": "An unexpected error occurred"},
            }
        )

    custom_response_data["status_code"] = status_code
    return JSONResponse(status_code=status_code, content=custom_response_data)
