"""Tests for the pure leaderboard and stats functions."""
from datetime import datetime, timedelta, timezone

from harmony.models import LeaderboardPeriod, Task
from harmony.scoring import build_leaderboard, build_user_stats, recent_completions
from tests.conftest import make_user

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


# ============================================================================
# Leaderboard
# ============================================================================

def test_leaderboard_orders_by_points():
    users = [make_user(name="A", total_points=450), make_user(name="B", total_points=890),
             make_user(name="C", total_points=320), make_user(name="D", total_points=680)]
    board = build_leaderboard(users)
    assert [e.user_name for e in board] == ["B", "D", "A", "C"]
    assert [e.rank for e in board] == [1, 2, 3, 4]
    assert len(board) == len(users)


def test_leaderboard_ties_keep_input_order():
    users = [make_user(name="First", total_points=100), make_user(name="Second", total_points=100),
             make_user(name="Top", total_points=200)]
    board = build_leaderboard(users)
    assert [e.user_name for e in board] == ["Top", "First", "Second"]
    assert build_leaderboard(users) == board


def test_every_period_ranks_by_total_points():
    users = [make_user(name="A", total_points=10), make_user(name="B", total_points=20)]
    expected = build_leaderboard(users)
    for period in LeaderboardPeriod:
        assert build_leaderboard(users, period) == expected


def test_empty_leaderboard():
    assert build_leaderboard([]) == []


# ============================================================================
# User stats
# ============================================================================

def _done(title, category, user, minutes_ago):
    task = Task(title=title, category=category)
    task.complete(user.id, NOW - timedelta(minutes=minutes_ago))
    return task


def test_recent_completions_newest_first_capped_at_five():
    user = make_user()
    tasks = [_done(f"t{i}", "Kitchen", user, minutes_ago=i) for i in range(8)]
    recent = recent_completions(reversed(tasks))
    assert [t.title for t in recent] == ["t0", "t1", "t2", "t3", "t4"]


def test_user_stats_counts_only_own_tasks():
    alex, emma = make_user(name="Alex"), make_user(name="Emma")
    tasks = [
        _done("Dishes", "Kitchen", alex, 3),
        _done("Counters", "Kitchen", alex, 2),
        _done("Laundry", "Laundry", alex, 1),
        _done("Mow lawn", "Outdoor", emma, 1),
        Task(title="Sweep", category="Living Room"),
    ]
    stats = build_user_stats(alex, tasks)
    assert stats.category_breakdown == {"Kitchen": 2, "Laundry": 1}
    assert [t.title for t in stats.recent_tasks] == ["Laundry", "Counters", "Dishes"]
    assert stats.to_dict()["level"] == alex.level
