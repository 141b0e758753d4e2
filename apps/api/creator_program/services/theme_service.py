"""Creator profile theme colors."""

from __future__ import annotations

import random
import re

from creator_program.core.constants import (
    THEME_MAX_LUMINANCE,
    THEME_MIN_LUMINANCE,
    THEME_PALETTE,
)

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

# Replaced in tests for deterministic picks
_rng = random.Random()


def pick_theme_color(rng: random.Random | None = None) -> str:
    return (rng or _rng).choice(THEME_PALETTE)


def luminance(color: str) -> float:
    r = int(color[1:3], 16)
    g = int(color[3:5], 16)
    b = int(color[5:7], 16)
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def is_valid_theme_color(color: str | None) -> bool:
    """Hex ``#rrggbb`` that is neither near-black nor near-white."""
    if not color or not _HEX_COLOR_RE.match(color):
        return False
    return THEME_MIN_LUMINANCE <= luminance(color) <= THEME_MAX_LUMINANCE
