import random

import pytest

from creator_program.core.constants import THEME_PALETTE
from creator_program.services import theme_service


def test_pick_theme_color_is_from_palette():
    for seed in range(20):
        assert theme_service.pick_theme_color(random.Random(seed)) in THEME_PALETTE


def test_pick_theme_color_is_deterministic_for_seeded_rng():
    first = theme_service.pick_theme_color(random.Random(7))
    second = theme_service.pick_theme_color(random.Random(7))
    assert first == second


def test_every_palette_color_is_a_valid_theme_color():
    assert all(theme_service.is_valid_theme_color(color) for color in THEME_PALETTE)


@pytest.mark.parametrize(
    "color",
    ["#000000", "#ffffff", "3b82f6", "#3b82f", "#GGGGGG", "", None],
)
def test_invalid_theme_colors(color):
    assert theme_service.is_valid_theme_color(color) is False
