"""Application middleware implementations."""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .context import (
    ACTOR_ID_HEADER,
    REQUEST_ID_HEADER,
    bind_actor_id,
    bind_request_id,
    reset_actor_id,
    reset_request_id,
)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation id and the asserted actor id for the request's lifetime.

    The correlation id is taken from ``X-Request-ID`` when the caller sends one
    and echoed back on the response.
    """

    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):  # type: ignore[override]
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get(self._header_name) or uuid.uuid4().hex
        request.state.request_id = request_id
        request_token = bind_request_id(request_id)
        actor_token = bind_actor_id(request.headers.get(ACTOR_ID_HEADER))
        try:
            response = await call_next(request)
        finally:
            reset_actor_id(actor_token)
            reset_request_id(request_token)
        response.headers.setdefault(self._header_name, request_id)
        return response


__all__ = ["CorrelationIdMiddleware"]
