import pytest

from creator_program.core.exceptions import ValidationError
from creator_program.schemas.creator_application import PlatformIn
from creator_program.services import follower_service


def _platform(platform_type: str, count: int) -> dict:
    return {
        "type": platform_type,
        "url": f"https://{platform_type}.example/me",
        "handle": "me",
        "follower_count": count,
        "verified_by_admin": False,
    }


def test_aggregate_uses_highest_single_platform():
    totals = follower_service.aggregate([_platform("twitch", 100), _platform("youtube", 600)])

    assert totals.max_followers == 600
    assert totals.total_followers == 700
    assert totals.meets_threshold is True


def test_aggregate_of_no_platforms_is_zero():
    totals = follower_service.aggregate([])

    assert totals.max_followers == 0
    assert totals.total_followers == 0
    assert totals.meets_threshold is False


def test_threshold_boundary():
    assert follower_service.aggregate([_platform("twitch", 500)]).meets_threshold is True
    assert follower_service.aggregate([_platform("twitch", 499)]).meets_threshold is False


def test_spread_out_followers_do_not_meet_threshold():
    platforms = [_platform("twitch", 300), _platform("youtube", 300), _platform("tiktok", 300)]

    totals = follower_service.aggregate(platforms)

    assert totals.total_followers == 900
    assert totals.meets_threshold is False


def test_normalize_platforms_lowercases_type_and_strips():
    platforms = follower_service.normalize_platforms(
        [PlatformIn(type=" Twitch ", url=" https://twitch.tv/x ", handle=" x ", follower_count=10)]
    )

    assert platforms == [
        {
            "type": "twitch",
            "url": "https://twitch.tv/x",
            "handle": "x",
            "follower_count": 10,
            "verified_by_admin": False,
        }
    ]


@pytest.mark.parametrize(
    "platforms",
    [
        [],
        [PlatformIn(type="twitch", follower_count=1)] * 6,
        [PlatformIn(type="myspace", follower_count=900)],
        [PlatformIn(type="twitch", follower_count=-1)],
    ],
)
def test_normalize_platforms_rejects_invalid_lists(platforms):
    with pytest.raises(ValidationError):
        follower_service.normalize_platforms(platforms)


def test_merge_platform_counts_updates_matching_types_and_appends_new():
    stored = [
        {
            "type": "twitch",
            "url": "https://twitch.tv/speedy",
            "handle": "speedy",
            "follower_count": 10,
            "verified_by_admin": True,
        }
    ]

    merged = follower_service.merge_platform_counts(
        stored,
        [{"type": "Twitch", "follower_count": 900}, {"type": "youtube", "follower_count": 50}],
    )

    assert merged[0]["follower_count"] == 900
    assert merged[0]["url"] == "https://twitch.tv/speedy"
    assert merged[0]["verified_by_admin"] is True
    assert merged[1]["type"] == "youtube"
    assert merged[1]["follower_count"] == 50
    # Stored list is not mutated
    assert stored[0]["follower_count"] == 10


def test_merge_platform_counts_rejects_negative_counts():
    with pytest.raises(ValidationError):
        follower_service.merge_platform_counts([], [{"type": "twitch", "follower_count": -5}])


def test_merge_platform_counts_enforces_platform_limit():
    stored = [_platform("other", 10) for _ in range(5)]

    with pytest.raises(ValidationError):
        follower_service.merge_platform_counts(stored, [{"type": "twitch", "follower_count": 1}])


@pytest.mark.parametrize(
    "count, expected",
    [(950, "950"), (1_000, "1.0K"), (1_200, "1.2K"), (1_500_000, "1.5M")],
)
def test_format_follower_count(count, expected):
    assert follower_service.format_follower_count(count) == expected
