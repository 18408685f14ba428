"""Tests for the badge catalog and automatic unlocks."""
from harmony.badges import ALL_BADGES, BADGES_BY_ID, AUTO_RULES, BadgeType, badges_for_user, evaluate_badges
from tests.conftest import make_user


def test_catalog_ids_are_unique():
    assert len(BADGES_BY_ID) == len(ALL_BADGES) == 18


def test_only_counter_badges_have_rules():
    ruled = {badge_id for badge_id, _ in AUTO_RULES}
    for badge in ALL_BADGES:
        if badge.type in (BadgeType.CATEGORY, BadgeType.SPECIAL):
            assert badge.id not in ruled
        else:
            assert badge.id in ruled


def test_first_completion_unlocks_first_task():
    user = make_user(tasks_completed=1, current_streak=1, longest_streak=1, total_points=15)
    assert evaluate_badges(user) == ["first_task"]
    assert user.badges_earned == ["first_task"]


def test_streak_of_seven_unlocks_week_warrior():
    user = make_user(current_streak=6, longest_streak=6, badges_earned=["streak_3"])
    user.update_streak()
    assert "streak_7" in evaluate_badges(user)


def test_crossing_one_hundred_points():
    user = make_user(total_points=95)
    assert "points_100" not in evaluate_badges(user)
    user.add_points(10)
    assert "points_100" in evaluate_badges(user)


def test_evaluation_never_duplicates():
    user = make_user(tasks_completed=12, total_points=150)
    first = evaluate_badges(user)
    assert set(first) == {"first_task", "tasks_10", "points_100"}
    assert evaluate_badges(user) == []
    assert len(user.badges_earned) == len(set(user.badges_earned))


def test_category_and_special_badges_never_auto_awarded():
    user = make_user(tasks_completed=500, current_streak=60, longest_streak=60, total_points=5000)
    evaluate_badges(user)
    for badge_id in ("kitchen_master", "clean_freak", "early_bird", "night_owl", "team_player"):
        assert badge_id not in user.badges_earned


def test_badges_for_user_flags_held():
    user = make_user(badges_earned=["first_task", "streak_3"])
    flags = {badge.id: unlocked for badge, unlocked in badges_for_user(user)}
    assert flags["first_task"] is True
    assert flags["streak_3"] is True
    assert flags["tasks_10"] is False
    assert sum(flags.values()) == 2
