"""Shared helpers for job handlers."""

from __future__ import annotations


def mask_email(email: str | None) -> str:
    """Mask an email for logs: ``ali...@example.com``."""
    if not email:
        return ""
    local, _, domain = email.partition("@")
    prefix = local[:3] if local else ""
    return f"{prefix}...@{domain}" if domain else f"{prefix}..."
