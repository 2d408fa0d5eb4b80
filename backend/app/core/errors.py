"""Error types and the exception handlers that turn them into JSON responses.

Every failure the API can produce is one of the classes below (or FastAPI's
RequestValidationError). Handlers discriminate on type, never on message text.
Anything else is treated as an internal error and reported without detail.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base for errors that map onto a fixed HTTP status and `error` string."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message
        super().__init__(message or self.error)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"

    def __init__(self, reason: str, message: Optional[str] = None) -> None:
        self.reason = reason
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["reason"] = self.reason
        return body


class UserNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "User not found"


class EmailConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "Email already exists"


def format_validation_errors(errors: list[dict[str, Any]]) -> list[str]:
    """Flatten pydantic error dicts into "field: message" strings.

    The leading location part ("body", "path", "query") is dropped; errors
    raised by a model-level validator have no field and keep only the message.
    """
    details = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ())[1:]]
        msg = err.get("msg", "Invalid value")
        details.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return details


def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation failed",
            "details": format_validation_errors(list(exc.errors())),
        },
    )


def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
