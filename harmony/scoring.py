"""Pure scoring functions — no DB or I/O."""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

from .models import LeaderboardEntry, LeaderboardPeriod, Task, User, UserStats

RECENT_TASKS_LIMIT = 5


def build_leaderboard(
    users: Iterable[User],
    period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME,
) -> list[LeaderboardEntry]:
    """Rank users by total points, highest first. Ties keep their input order.

    Points are not tracked per period, so every period ranks by all-time points.
    """
    ranked = sorted(users, key=lambda u: u.total_points, reverse=True)
    return [LeaderboardEntry.from_user(user, rank) for rank, user in enumerate(ranked, start=1)]


def completed_by_user(user_id: UUID, tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.completed_by == user_id]


def category_breakdown(completed: Iterable[Task]) -> dict[str, int]:
    result: dict[str, int] = {}
    for t in completed:
        result[t.category] = result.get(t.category, 0) + 1
    return result


def recent_completions(completed: Iterable[Task], limit: int = RECENT_TASKS_LIMIT) -> list[Task]:
    dated = [t for t in completed if t.completed_at is not None]
    dated.sort(key=lambda t: t.completed_at, reverse=True)
    return dated[:limit]


def build_user_stats(user: User, tasks: Iterable[Task]) -> UserStats:
    completed = completed_by_user(user.id, tasks)
    return UserStats(
        user=user,
        category_breakdown=category_breakdown(completed),
        recent_tasks=recent_completions(completed),
    )
