"""Household state: users, chores and the gamification rules that tie them together.

All mutations run under one asyncio lock and persist before the lock is
released, so two commands never interleave. Expected misses (unknown id, nobody
selected) come back as an Outcome instead of raising.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from datetime import date, datetime
from typing import Callable
from uuid import UUID
from zoneinfo import ZoneInfo

from .badges import BadgeDef, badges_for_user, evaluate_badges
from .config import SEED_SAMPLE_DATA, TIMEZONE
from .daily_reset import is_reset_due, reset_recurring_tasks
from .database import Storage
from .defaults import sample_categories, sample_users
from .models import (
    Category,
    Frequency,
    LeaderboardEntry,
    LeaderboardPeriod,
    Outcome,
    Priority,
    Task,
    User,
    UserStats,
    utcnow,
)
from .scoring import build_leaderboard, build_user_stats

logger = logging.getLogger(__name__)

EDITABLE_TASK_FIELDS = frozenset(
    {"title", "description", "points", "priority", "frequency", "due_date", "assigned_to"}
)


class GamificationEngine:
    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], datetime] = utcnow,
        timezone: str = TIMEZONE,
        seed_samples: bool = SEED_SAMPLE_DATA,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self.tz = ZoneInfo(timezone)
        self.seed_samples = seed_samples
        self.users: dict[UUID, User] = {}
        self.categories: dict[UUID, Category] = {}
        self.tasks: dict[UUID, Task] = {}
        self.current_user_id: UUID | None = None
        self._lock = asyncio.Lock()

    @property
    def current_user(self) -> User | None:
        if self.current_user_id is None:
            return None
        return self.users.get(self.current_user_id)

    def today(self) -> date:
        return self.clock().astimezone(self.tz).date()

    # ── Loading ───────────────────────────────────────────

    async def load(self) -> None:
        async with self._lock:
            self.users = {u.id: u for u in await self.storage.load_users()}
            self._set_categories(await self.storage.load_categories())

            if not self.users and self.seed_samples:
                self.users = {u.id: u for u in sample_users(self.clock())}
                await self._save_users()
                logger.info("Seeded %d sample users", len(self.users))
            if not self.categories and self.seed_samples:
                self._set_categories(sample_categories(self.clock()))
                await self._save_categories()
                logger.info("Seeded %d sample categories", len(self.categories))

    def _set_categories(self, loaded: list[tuple[Category, list[Task]]]) -> None:
        self.categories = {}
        self.tasks = {}
        for category, tasks in loaded:
            self.categories[category.id] = category
            for t in tasks:
                self.tasks[t.id] = t

    async def _save_users(self) -> None:
        await self.storage.save_users(self.users.values())

    async def _save_categories(self) -> None:
        await self.storage.save_categories(self.categories.values(), self.tasks)

    def _find_task(self, task_id: UUID, category_id: UUID) -> Task | None:
        category = self.categories.get(category_id)
        if category is None or task_id not in category.task_ids:
            return None
        return self.tasks.get(task_id)

    def get_task(self, task_id: UUID) -> Task | None:
        return self.tasks.get(task_id)

    def category_tasks(self, category_id: UUID) -> list[Task]:
        category = self.categories.get(category_id)
        return category.tasks(self.tasks) if category else []

    # ── Users ─────────────────────────────────────────────

    async def select_user(self, user_id: UUID) -> Outcome:
        async with self._lock:
            user = self.users.get(user_id)
            if user is None:
                logger.debug("select_user: unknown user %s", user_id)
                return Outcome.NOT_FOUND
            self.current_user_id = user_id
            user.touch(self.clock())
            await self._save_users()
            return Outcome.OK

    def logout(self) -> None:
        self.current_user_id = None

    async def create_user(
        self, name: str, avatar: str, color_theme: str, is_admin: bool = False
    ) -> User:
        async with self._lock:
            now = self.clock()
            user = User(
                name=name,
                avatar=avatar,
                color_theme=color_theme,
                created_at=now,
                last_active=now,
                is_admin=is_admin,
            )
            self.users[user.id] = user
            await self._save_users()
            logger.info("Created user %s (%s)", user.name, user.id)
            return user

    async def update_user(self, user: User) -> Outcome:
        """Replace the stored record with the same id. Unknown ids are not inserted.

        The stored copy keeps longest_streak >= current_streak and never moves
        last_active backwards.
        """
        async with self._lock:
            existing = self.users.get(user.id)
            if existing is None:
                return Outcome.NOT_FOUND
            updated = copy.deepcopy(user)
            updated.longest_streak = max(updated.longest_streak, updated.current_streak)
            updated.last_active = max(existing.last_active, updated.last_active)
            self.users[user.id] = updated
            await self._save_users()
            return Outcome.OK

    async def reset_streak(self, user_id: UUID) -> Outcome:
        async with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return Outcome.NOT_FOUND
            user.update_streak(increment=False)
            await self._save_users()
            return Outcome.OK

    # ── Claims and completion ─────────────────────────────

    async def claim_task(self, task_id: UUID, category_id: UUID) -> Outcome:
        async with self._lock:
            user = self.current_user
            if user is None:
                return Outcome.NO_CURRENT_USER
            task = self._find_task(task_id, category_id)
            if task is None:
                return Outcome.NOT_FOUND
            if task.claimed_by is not None and task.claimed_by != user.id:
                logger.info("Claim on %r moves from %s to %s", task.title, task.claimed_by, user.id)
            task.claim(user.id, self.clock())
            await self._save_categories()
            return Outcome.OK

    async def unclaim_task(self, task_id: UUID, category_id: UUID) -> Outcome:
        async with self._lock:
            task = self._find_task(task_id, category_id)
            if task is None:
                return Outcome.NOT_FOUND
            task.unclaim()
            await self._save_categories()
            return Outcome.OK

    async def complete_task(self, task_id: UUID, category_id: UUID) -> Outcome:
        async with self._lock:
            user = self.current_user
            if user is None:
                logger.debug("complete_task: nobody selected")
                return Outcome.NO_CURRENT_USER
            task = self._find_task(task_id, category_id)
            if task is None:
                return Outcome.NOT_FOUND

            task.complete(user.id, self.clock())
            user.add_points(task.points)
            user.increment_task_count()
            user.update_streak(increment=True)
            new_badges = evaluate_badges(user)

            await self._save_categories()
            await self._save_users()

            logger.info(
                "%s completed %r (+%d pts, total %d)",
                user.name, task.title, task.points, user.total_points,
            )
            for badge_id in new_badges:
                logger.info("%s earned badge %s", user.name, badge_id)
            return Outcome.OK

    # ── Queries ───────────────────────────────────────────

    def get_leaderboard(
        self, period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME
    ) -> list[LeaderboardEntry]:
        return build_leaderboard(self.users.values(), period)

    def get_user_stats(self, user_id: UUID) -> UserStats | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        return build_user_stats(user, self.tasks.values())

    def badges_for_user(self, user_id: UUID) -> list[tuple[BadgeDef, bool]] | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        return badges_for_user(user)

    # ── Daily reset ───────────────────────────────────────

    async def check_and_perform_daily_reset(self, today: date | None = None) -> bool:
        """Reset daily chores at most once per calendar day. Returns True if a reset ran."""
        async with self._lock:
            today = today or self.today()
            last_reset = await self.storage.load_last_reset_date()
            if not is_reset_due(last_reset, today):
                return False
            count = reset_recurring_tasks(self.tasks.values())
            await self._save_categories()
            await self.storage.save_last_reset_date(today)
            logger.info("Daily reset for %s cleared %d tasks", today.isoformat(), count)
            return True

    # ── Categories (admin) ────────────────────────────────

    async def add_category(self, name: str, icon: str, color: str) -> Category:
        async with self._lock:
            category = Category(name=name, icon=icon, color=color)
            self.categories[category.id] = category
            await self._save_categories()
            return category

    async def update_category(
        self,
        category_id: UUID,
        name: str | None = None,
        icon: str | None = None,
        color: str | None = None,
    ) -> Outcome:
        async with self._lock:
            category = self.categories.get(category_id)
            if category is None:
                return Outcome.NOT_FOUND
            if name is not None:
                category.name = name
                for t in category.tasks(self.tasks):
                    t.category = name
            if icon is not None:
                category.icon = icon
            if color is not None:
                category.color = color
            await self._save_categories()
            return Outcome.OK

    async def delete_category(self, category_id: UUID) -> Outcome:
        async with self._lock:
            category = self.categories.pop(category_id, None)
            if category is None:
                return Outcome.NOT_FOUND
            for task_id in category.task_ids:
                self.tasks.pop(task_id, None)
            await self._save_categories()
            logger.info("Deleted category %s with %d tasks", category.name, len(category.task_ids))
            return Outcome.OK

    # ── Tasks (admin) ─────────────────────────────────────

    async def add_task(
        self,
        category_id: UUID,
        title: str,
        description: str = "",
        points: int | None = None,
        priority: Priority = Priority.MEDIUM,
        frequency: Frequency = Frequency.DAILY,
        due_date: datetime | None = None,
        assigned_to: UUID | None = None,
    ) -> Task | None:
        """Append a chore to a category; an assignee holds the claim from the start."""
        async with self._lock:
            category = self.categories.get(category_id)
            if category is None:
                return None
            now = self.clock()
            task = Task(
                title=title,
                description=description,
                points=points if points is not None else priority.points,
                category=category.name,
                priority=priority,
                frequency=frequency,
                due_date=due_date,
                created_at=now,
            )
            if assigned_to is not None:
                task.claim(assigned_to, now)
            self.tasks[task.id] = task
            category.task_ids.append(task.id)
            await self._save_categories()
            return task

    async def update_task(
        self,
        task_id: UUID,
        category_id: UUID,
        new_category_id: UUID | None = None,
        **changes,
    ) -> Outcome:
        unknown = set(changes) - EDITABLE_TASK_FIELDS
        if unknown:
            raise TypeError(f"Cannot edit task fields: {', '.join(sorted(unknown))}")

        async with self._lock:
            task = self._find_task(task_id, category_id)
            if task is None:
                return Outcome.NOT_FOUND
            target = self.categories.get(new_category_id or category_id)
            if target is None:
                return Outcome.NOT_FOUND

            if "assigned_to" in changes:
                assignee = changes.pop("assigned_to")
                if assignee is None:
                    task.unclaim()
                else:
                    task.claim(assignee, self.clock())
            for name, value in changes.items():
                setattr(task, name, value)

            if target.id != category_id:
                self.categories[category_id].task_ids.remove(task_id)
                target.task_ids.append(task_id)
            task.category = target.name
            await self._save_categories()
            return Outcome.OK

    async def delete_task(self, task_id: UUID, category_id: UUID) -> Outcome:
        async with self._lock:
            if self._find_task(task_id, category_id) is None:
                return Outcome.NOT_FOUND
            self.categories[category_id].task_ids.remove(task_id)
            del self.tasks[task_id]
            await self._save_categories()
            return Outcome.OK

    # ── Whole store ───────────────────────────────────────

    async def clear_all_data(self) -> None:
        async with self._lock:
            await self.storage.clear_all()
            self.users = {}
            self.categories = {}
            self.tasks = {}
            self.current_user_id = None
            logger.info("Cleared all household data")

    async def reset_to_defaults(self) -> None:
        async with self._lock:
            await self.storage.clear_all()
            self.users = {u.id: u for u in sample_users(self.clock())}
            self._set_categories(sample_categories(self.clock()))
            self.current_user_id = None
            await self._save_users()
            await self._save_categories()
            logger.info("Restored sample household")
