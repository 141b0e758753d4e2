import re

import pytest

from creator_program.core.exceptions import ValidationError
from creator_program.db.enums import CreatorStatus
from creator_program.services import slug_service


@pytest.mark.parametrize(
    "display_name, expected",
    [
        ("Speedy Runner", "speedy-runner"),
        ("  Café   Gamer!! ", "caf-gamer"),
        ("--Neon__Lights--", "neonlights"),
        ("A  -  B", "a-b"),
        ("Retro 64", "retro-64"),
    ],
)
def test_slugify(display_name, expected):
    assert slug_service.slugify(display_name) == expected


def test_ensure_sluggable_rejects_names_without_letters_or_digits():
    with pytest.raises(ValidationError) as exc:
        slug_service.ensure_sluggable("!!! ???")

    assert exc.value.message == slug_service.EMPTY_SLUG_MESSAGE


def test_generate_unique_slug_returns_base_when_free(db):
    assert slug_service.generate_unique_slug(db, "Speedy Runner") == "speedy-runner"


def test_generate_unique_slug_appends_suffix_on_collision(db, creator):
    assert creator.slug == "speedy-runner"

    slug = slug_service.generate_unique_slug(db, "Speedy Runner")

    assert re.fullmatch(r"speedy-runner-[0-9a-f]{6}", slug)


def test_removed_creators_keep_their_slug(db, creator):
    creator.status = CreatorStatus.REMOVED.value
    db.commit()

    slug = slug_service.generate_unique_slug(db, "speedy runner")

    assert slug != "speedy-runner"
    assert slug.startswith("speedy-runner-")
