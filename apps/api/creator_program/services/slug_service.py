"""Slug generation for public creator profile URLs."""

from __future__ import annotations

import re
import uuid

from sqlalchemy.orm import Session

from creator_program.core.exceptions import ValidationError
from creator_program.db.models import Creator

SUFFIX_LENGTH = 6
EMPTY_SLUG_MESSAGE = "display name must contain at least one letter or number"

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_REPEATED_HYPHEN_RE = re.compile(r"-+")


def slugify(display_name: str) -> str:
    """
    Canonical slug for a display name.

    Lowercase, whitespace becomes hyphens, anything outside [a-z0-9-] is
    dropped, repeated hyphens collapse and edge hyphens are trimmed. Returns
    "" when nothing alphanumeric survives.
    """
    slug = (display_name or "").strip().lower()
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _DISALLOWED_RE.sub("", slug)
    slug = _REPEATED_HYPHEN_RE.sub("-", slug)
    return slug.strip("-")


def ensure_sluggable(display_name: str) -> str:
    slug = slugify(display_name)
    if not slug:
        raise ValidationError(EMPTY_SLUG_MESSAGE, code="invalid_display_name")
    return slug


def slug_exists(db: Session, slug: str) -> bool:
    # Removed creators keep their slug
    return db.query(Creator.id).filter(Creator.slug == slug).first() is not None


def generate_unique_slug(db: Session, display_name: str) -> str:
    base = ensure_sluggable(display_name)
    if not slug_exists(db, base):
        return base

    while True:
        candidate = f"{base}-{uuid.uuid4().hex[:SUFFIX_LENGTH]}"
        if not slug_exists(db, candidate):
            return candidate
