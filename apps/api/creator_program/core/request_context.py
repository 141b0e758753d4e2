"""Per-request context used to tag log records."""

from contextvars import ContextVar, Token


_REQUEST_ID: ContextVar[str | None] = ContextVar("request_id", default=None)


def start_request_context(request_id: str) -> Token:
    """Bind the request id for the current request and return context token."""
    return _REQUEST_ID.set(request_id)


def reset_request_context(token: Token) -> None:
    """Restore the previous request-local state."""
    _REQUEST_ID.reset(token)


def current_request_id() -> str | None:
    return _REQUEST_ID.get()
