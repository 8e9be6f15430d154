"""Error types for the API client and JSON error handlers for the reference backend.

Client side, only ``ApiRequestFailed`` reaches callers of ``ApiClient``:
transport and status failures are retried and folded into it once the
attempts run out.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("licence_admin.errors")


class ApiError(Exception):
    pass


class ConfigurationError(ApiError):
    """Client settings are missing or invalid (e.g. no base URL)."""


class HttpStatusError(ApiError):
    """Backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ApiRequestFailed(ApiError):
    """Terminal failure raised once every attempt has failed."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"API Request Failed after {attempts} attempts: {error_message(last_error)}"
        )

    @property
    def status_code(self) -> int | None:
        return getattr(self.last_error, "status_code", None)


def error_message(exc: BaseException) -> str:
    # Some httpx errors stringify to "" (e.g. bare timeouts)
    return str(exc) or exc.__class__.__name__


# Reference backend handlers -----------------------------------------


_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def http_exception_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"No route for {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": _ERROR_CODES.get(exc.status_code, "http_error"),
            "message": message,
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{loc}: {first.get('msg', 'invalid input')}" if loc else "invalid input"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": message,
            "detail": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                for e in errors
            ],
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred.",
        },
    )
