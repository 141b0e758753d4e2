"""Structured logging helpers."""

from typing import Any

from creator_program.core.request_context import current_request_id


def build_log_context(
    *,
    user_id: str | None = None,
    admin_id: str | None = None,
    creator_id: str | None = None,
    application_id: str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """
    Return a log ``extra`` dict with only the populated keys.

    ``request_id`` defaults to the id bound by the request middleware.
    """
    fields = {
        "user_id": user_id,
        "admin_id": admin_id,
        "creator_id": creator_id,
        "application_id": application_id,
        "request_id": request_id or current_request_id(),
        "route": route,
        "method": method,
    }
    return {key: str(value) for key, value in fields.items() if value}
