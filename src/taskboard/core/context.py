"""Request-scoped context: correlation id and the acting user's id."""

from __future__ import annotations

from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"
ACTOR_ID_HEADER = "X-Actor-Id"

UNBOUND = "-"

_request_id: ContextVar[str] = ContextVar("request_id", default=UNBOUND)
_actor_id: ContextVar[str] = ContextVar("actor_id", default=UNBOUND)


def get_request_id() -> str:
    return _request_id.get()


def bind_request_id(request_id: str) -> Token[str]:
    return _request_id.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id.reset(token)


def get_actor_id() -> str:
    """Return the id of the actor behind the current request, or ``"-"``."""
    return _actor_id.get()


def bind_actor_id(actor_id: str | None) -> Token[str]:
    return _actor_id.set(actor_id or UNBOUND)


def reset_actor_id(token: Token[str]) -> None:
    _actor_id.reset(token)


__all__ = [
    "ACTOR_ID_HEADER",
    "REQUEST_ID_HEADER",
    "UNBOUND",
    "bind_actor_id",
    "bind_request_id",
    "get_actor_id",
    "get_request_id",
    "reset_actor_id",
    "reset_request_id",
]
