"""Unit tests for household entities: leveling, streaks, claims and serialization."""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from harmony.models import (
    Category,
    Frequency,
    LeaderboardEntry,
    Outcome,
    Priority,
    Task,
    User,
    level_for_points,
    progress_for_points,
)
from tests.conftest import make_user

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


# ============================================================================
# Levels and progress
# ============================================================================

@pytest.mark.parametrize(
    "points,level",
    [(0, 1), (99, 1), (100, 2), (199, 2), (450, 5), (1000, 11)],
)
def test_level_for_points(points, level):
    assert level_for_points(points) == level


def test_progress_is_fraction_of_current_band():
    assert progress_for_points(50) == pytest.approx(0.5)
    assert progress_for_points(150) == pytest.approx(0.5)
    assert progress_for_points(200) == 0.0


def test_progress_stays_in_unit_interval():
    for points in (0, 1, 99, 100, 12345):
        assert 0.0 <= progress_for_points(points) <= 1.0


def test_user_level_properties():
    user = make_user(total_points=450)
    assert user.level == 5
    assert user.progress_to_next_level == pytest.approx(0.5)


# ============================================================================
# User counters
# ============================================================================

def test_streak_increment_raises_longest():
    user = make_user(current_streak=4, longest_streak=4)
    user.update_streak(increment=True)
    assert user.current_streak == 5
    assert user.longest_streak == 5


def test_streak_increment_below_longest_keeps_longest():
    user = make_user(current_streak=2, longest_streak=9)
    user.update_streak()
    assert (user.current_streak, user.longest_streak) == (3, 9)


def test_streak_break_resets_current_only():
    user = make_user(current_streak=6, longest_streak=10)
    user.update_streak(increment=False)
    assert user.current_streak == 0
    assert user.longest_streak == 10


def test_earn_badge_once():
    user = make_user()
    assert user.earn_badge("first_task") is True
    assert user.earn_badge("first_task") is False
    assert user.badges_earned == ["first_task"]


def test_touch_never_moves_backwards():
    user = make_user(last_active=NOW)
    user.touch(NOW - timedelta(hours=1))
    assert user.last_active == NOW
    user.touch(NOW + timedelta(hours=1))
    assert user.last_active == NOW + timedelta(hours=1)


# ============================================================================
# Task state
# ============================================================================

def test_new_task_is_available():
    task = Task(title="Sweep", category="Living Room")
    assert task.is_available
    assert not task.is_claimed
    assert task.points == 10
    assert task.priority is Priority.MEDIUM
    assert task.frequency is Frequency.DAILY


def test_claimed_task_is_not_available():
    task = Task(title="Sweep", category="Living Room")
    task.claim(uuid4(), NOW)
    assert task.is_claimed
    assert not task.is_available
    task.unclaim()
    assert task.claimed_by is None and task.claimed_at is None
    assert task.is_available


def test_reset_clears_completion_and_claim():
    task = Task(title="Sweep", category="Living Room")
    user_id = uuid4()
    task.claim(user_id, NOW)
    task.complete(user_id, NOW)
    task.reset()
    assert task.is_available
    assert task.completed_by is None
    assert task.completed_at is None


def test_priority_default_points():
    assert [p.points for p in Priority] == [5, 10, 20]


def test_outcome_truthiness():
    assert Outcome.OK
    assert not Outcome.NOT_FOUND
    assert not Outcome.NO_CURRENT_USER


# ============================================================================
# Serialization
# ============================================================================

def test_user_round_trip():
    user = make_user(total_points=120, current_streak=3, longest_streak=5,
                     tasks_completed=12, badges_earned=["first_task", "tasks_10"], is_admin=True)
    restored = User.from_dict(user.to_dict())
    assert restored == user


def test_user_from_dict_drops_duplicate_badges():
    data = make_user().to_dict()
    data["badges_earned"] = ["streak_3", "streak_3", "first_task"]
    assert User.from_dict(data).badges_earned == ["streak_3", "first_task"]


def test_task_round_trip_with_empty_optionals():
    task = Task(title="Water plants", category="Outdoor", created_at=NOW)
    data = task.to_dict()
    assert data["claimed_by"] is None
    assert data["due_date"] is None
    assert Task.from_dict(data) == task


def test_task_round_trip_with_every_field_set():
    user_id = uuid4()
    task = Task(
        title="Mow lawn",
        category="Outdoor",
        description="Front and back",
        points=30,
        priority=Priority.HIGH,
        frequency=Frequency.WEEKLY,
        due_date=NOW + timedelta(days=2),
        created_at=NOW,
    )
    task.claim(user_id, NOW)
    task.complete(user_id, NOW + timedelta(minutes=30))
    assert Task.from_dict(task.to_dict()) == task


def test_category_round_trip_nests_tasks():
    tasks = [Task(title=t, category="Kitchen", created_at=NOW) for t in ("Dishes", "Counters")]
    category = Category(name="Kitchen", icon="fork.knife", color="#FF6B6B",
                        task_ids=[t.id for t in tasks])
    store = {t.id: t for t in tasks}

    restored, restored_tasks = Category.from_dict(category.to_dict(store))

    assert restored == category
    assert restored_tasks == tasks


def test_category_completion_percentage():
    tasks = [Task(title=str(i), category="Kitchen") for i in range(4)]
    tasks[0].complete(uuid4(), NOW)
    category = Category(name="Kitchen", icon="fork.knife", color="#FF6B6B",
                        task_ids=[t.id for t in tasks])
    store = {t.id: t for t in tasks}
    assert category.completed_count(store) == 1
    assert category.total_count == 4
    assert category.completion_percentage(store) == pytest.approx(0.25)


def test_empty_category_completion_is_zero():
    category = Category(name="Garage", icon="car.fill", color="#000000")
    assert category.completion_percentage({}) == 0.0


# ============================================================================
# Leaderboard rows
# ============================================================================

@pytest.mark.parametrize("rank,emoji", [(1, "🥇"), (2, "🥈"), (3, "🥉"), (4, "🏅")])
def test_rank_emoji(rank, emoji):
    entry = LeaderboardEntry.from_user(make_user(), rank)
    assert entry.rank_emoji == emoji


def test_entry_copies_user_counters():
    user = make_user(total_points=300, tasks_completed=30, current_streak=4,
                     badges_earned=["first_task", "tasks_25"])
    entry = LeaderboardEntry.from_user(user, 2)
    assert entry.points == 300
    assert entry.tasks_completed == 30
    assert entry.streak == 4
    assert entry.badge_count == 2
    assert entry.to_dict()["user_id"] == str(user.id)
