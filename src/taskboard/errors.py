"""Error taxonomy of the task board and the FastAPI handlers that render it.

Every error leaves the service as an ``ErrorResponse`` envelope. Store
failures come in two kinds that callers must tell apart: a failed load
(``FetchError``) leaves nothing to render, while a failed part write
(``UpdateError``) abandons the change and leaves the board as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import (
    ACTOR_ID_HEADER,
    REQUEST_ID_HEADER,
    bind_actor_id,
    bind_request_id,
    reset_actor_id,
    reset_request_id,
)
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for errors rendered as the ``ErrorResponse`` envelope.

    Subclasses fix ``code``, ``status_code`` and ``outcome``; the constructor
    may still override the first two for one-off errors.
    """

    code = "application_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."
    # What became of the caller's request; recorded on the handler's log line.
    outcome = "rejected"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class NotFoundError(ApplicationError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class ValidationError(ApplicationError):
    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Validation failed."


class FilterUnavailableError(ValidationError):
    """A requested task filter cannot be served by the store."""

    code = "filter_unavailable"
    default_message = "Requested task filter is unavailable."


class StoreError(ApplicationError):
    """The task store failed or timed out."""

    code = "store_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "The task store is unavailable."
    outcome = "store_failed"


class FetchError(StoreError):
    """Loading tasks failed; there is no partial board to render."""

    code = "fetch_error"
    default_message = "Failed to load tasks."
    outcome = "load_failed"


class UpdateError(StoreError):
    """A part write failed; the change was abandoned and the board is unchanged."""

    code = "update_error"
    default_message = "Failed to update task part."
    outcome = "change_abandoned"


class ServerError(ApplicationError):
    code = "server_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error."
    outcome = "failed"


_HTTP_ERROR_CODES: dict[int, str] = {
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def _with_request_id(details: Any | None, request_id: str) -> Any:
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, Mapping):
        return {"request_id": request_id, **details}
    return {"request_id": request_id, "detail": details}


def _envelope(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        details = _with_request_id(details, request_id)
    body = ErrorResponse(code=code, message=message, details=details)
    response = JSONResponse(
        body.model_dump(mode="json"),
        status_code=status_code,
        headers=dict(headers) if headers else None,
    )
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


@contextmanager
def _request_context(request: Request) -> Iterator[None]:
    """Re-bind the request's log context outside the correlation middleware."""
    request_token = bind_request_id(getattr(request.state, "request_id", None) or "-")
    actor_token = bind_actor_id(request.headers.get(ACTOR_ID_HEADER))
    try:
        yield
    finally:
        reset_actor_id(actor_token)
        reset_request_id(request_token)


async def _on_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logging.WARNING
    logger.log(
        level,
        "Request ended with %s",
        exc.code,
        extra={
            "code": exc.code,
            "outcome": exc.outcome,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )
    return _envelope(
        request,
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def _on_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        "Request validation failed",
        extra={"errors": errors, "outcome": "rejected", "path": request.url.path},
    )
    return _envelope(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code=ValidationError.code,
        message="Request validation failed.",
        details={"errors": errors},
    )


async def _on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    if isinstance(exc.detail, str):
        message, details = exc.detail, None
    else:
        message, details = HTTPStatus(exc.status_code).phrase, exc.detail
    logger.warning(
        "HTTP error %d",
        exc.status_code,
        extra={"code": code, "outcome": "rejected", "path": request.url.path},
    )
    return _envelope(
        request,
        status_code=exc.status_code,
        code=code,
        message=message,
        details=details,
        headers=exc.headers,
    )


async def _on_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    error = ServerError()
    # Runs after the correlation middleware has unwound its context.
    with _request_context(request):
        logger.exception(
            "Unhandled error while serving %s",
            request.url.path,
            extra={"code": error.code, "outcome": error.outcome},
        )
    return _envelope(
        request,
        status_code=error.status_code,
        code=error.code,
        message=error.message,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, _on_application_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _on_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _on_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _on_unhandled_error)


__all__ = [
    "ApplicationError",
    "FetchError",
    "FilterUnavailableError",
    "NotFoundError",
    "ServerError",
    "StoreError",
    "UpdateError",
    "ValidationError",
    "register_exception_handlers",
]
