"""Follower aggregation over per-platform counts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from creator_program.core.constants import FOLLOWER_THRESHOLD, MAX_PLATFORMS, PRIMARY_PLATFORMS
from creator_program.core.exceptions import ValidationError


@dataclass(frozen=True)
class FollowerTotals:
    max_followers: int
    total_followers: int

    @property
    def meets_threshold(self) -> bool:
        return self.max_followers >= FOLLOWER_THRESHOLD


def _count(platform: Mapping) -> int:
    return int(platform.get("follower_count") or 0)


def aggregate(platforms: Iterable[Mapping]) -> FollowerTotals:
    """Largest single-platform count and the sum across platforms."""
    counts = [_count(p) for p in platforms]
    return FollowerTotals(
        max_followers=max(counts, default=0),
        total_followers=sum(counts),
    )


def normalize_platforms(platforms: Iterable) -> list[dict]:
    """Validate submitted platforms (objects with type/url/handle/follower_count)."""
    platforms = list(platforms or [])
    if not platforms or len(platforms) > MAX_PLATFORMS:
        raise ValidationError(
            f"between 1 and {MAX_PLATFORMS} platforms are required", code="invalid_platforms"
        )
    normalized = []
    for platform in platforms:
        platform_type = platform.type.strip().lower()
        if platform_type not in PRIMARY_PLATFORMS:
            raise ValidationError(f"unsupported platform: {platform.type}", code="invalid_platforms")
        if platform.follower_count < 0:
            raise ValidationError("follower counts cannot be negative", code="invalid_platforms")
        normalized.append(
            {
                "type": platform_type,
                "url": platform.url.strip(),
                "handle": platform.handle.strip(),
                "follower_count": platform.follower_count,
                "verified_by_admin": False,
            }
        )
    return normalized


def merge_platform_counts(stored: list[dict], updates: Iterable[Mapping]) -> list[dict]:
    """
    Apply fresh follower counts to a stored platform list.

    Platforms are matched by type; url/handle/verification are kept. Types
    not yet stored are appended. Returns a new list.
    """
    merged = [dict(p) for p in stored]
    index = {p.get("type"): p for p in merged}
    for update in updates:
        count = _count(update)
        if count < 0:
            raise ValidationError("follower counts cannot be negative", code="invalid_platforms")
        platform_type = (update.get("type") or "").strip().lower()
        if platform_type not in PRIMARY_PLATFORMS:
            raise ValidationError(f"unsupported platform: {platform_type}", code="invalid_platforms")
        existing = index.get(platform_type)
        if existing is not None:
            existing["follower_count"] = count
            continue
        platform = {
            "type": platform_type,
            "url": update.get("url") or "",
            "handle": update.get("handle") or "",
            "follower_count": count,
            "verified_by_admin": False,
        }
        merged.append(platform)
        index[platform_type] = platform

    if len(merged) > MAX_PLATFORMS:
        raise ValidationError(f"at most {MAX_PLATFORMS} platforms are allowed", code="invalid_platforms")
    return merged


def format_follower_count(count: int) -> str:
    """Compact count for emails: 950, 1.2K, 1.5M."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)
