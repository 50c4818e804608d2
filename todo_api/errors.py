"""Error taxonomy and the handlers that render it as `{"error": ...}` JSON."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class TodoAPIError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(TodoAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "invalid request"


class UnauthenticatedError(TodoAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "invalid token"


class InvalidCredentialsError(TodoAPIError):
    """Login failure. Unknown email and wrong password share this error."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "invalid credentials"


class NotFoundError(TodoAPIError):
    """Missing resource, or one owned by another user."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "not found"


class ConflictError(TodoAPIError):
    status_code = status.HTTP_409_CONFLICT
    message = "conflict"


class NotSupportedError(TodoAPIError):
    status_code = status.HTTP_501_NOT_IMPLEMENTED
    message = "operation not supported"


class UpstreamError(TodoAPIError):
    message = "upstream request failed"


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def todo_api_error_handler(request: Request, exc: TodoAPIError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(exc.status_code, exc.message, headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Collapse pydantic's error list into a single readable message."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages) or "invalid request")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TodoAPIError, todo_api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
