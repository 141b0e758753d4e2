"""Tests for structured logging helpers."""

import uuid

from creator_program.core.request_context import reset_request_context, start_request_context
from creator_program.core.structured_logging import build_log_context
from creator_program.jobs.utils import mask_email


def test_build_log_context_includes_only_provided_fields():
    creator_id = uuid.uuid4()

    context = build_log_context(
        admin_id="admin-1",
        creator_id=creator_id,
        request_id="req-1",
        route="/admin/creators",
        method="POST",
    )

    assert context == {
        "admin_id": "admin-1",
        "creator_id": str(creator_id),
        "request_id": "req-1",
        "route": "/admin/creators",
        "method": "POST",
    }


def test_build_log_context_uses_bound_request_id():
    token = start_request_context("req-bound")
    try:
        assert build_log_context(user_id="") == {"request_id": "req-bound"}
    finally:
        reset_request_context(token)

    assert build_log_context(user_id=None) == {}


def test_mask_email():
    assert mask_email("alice@example.com") == "ali...@example.com"
    assert mask_email("bo") == "bo..."
    assert mask_email(None) == ""
