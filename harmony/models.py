"""Household entities: users, chore tasks, categories and leaderboard rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping
from uuid import UUID, uuid4

POINTS_PER_LEVEL = 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def level_for_points(total_points: int) -> int:
    return total_points // POINTS_PER_LEVEL + 1


def progress_for_points(total_points: int) -> float:
    """Fraction of the current level band already earned, clamped to [0, 1]."""
    floor = (level_for_points(total_points) - 1) * POINTS_PER_LEVEL
    progress = (total_points - floor) / POINTS_PER_LEVEL
    return min(max(progress, 0.0), 1.0)


def encode_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def decode_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def encode_id(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def decode_id(value: str | None) -> UUID | None:
    return UUID(value) if value else None


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def points(self) -> int:
        return {"low": 5, "medium": 10, "high": 20}[self.value]


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONE_TIME = "one_time"


class Outcome(str, Enum):
    """Result of a state-changing command."""

    OK = "ok"
    NOT_FOUND = "not_found"
    NO_CURRENT_USER = "no_current_user"

    def __bool__(self) -> bool:
        return self is Outcome.OK


class LeaderboardPeriod(str, Enum):
    ALL_TIME = "all_time"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"


# ── Users ─────────────────────────────────────────────────


@dataclass
class User:
    name: str
    avatar: str
    color_theme: str
    id: UUID = field(default_factory=uuid4)
    total_points: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    tasks_completed: int = 0
    badges_earned: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    last_active: datetime = field(default_factory=utcnow)
    is_admin: bool = False

    @property
    def level(self) -> int:
        return level_for_points(self.total_points)

    @property
    def progress_to_next_level(self) -> float:
        return progress_for_points(self.total_points)

    def add_points(self, points: int) -> None:
        self.total_points += points

    def increment_task_count(self) -> None:
        self.tasks_completed += 1

    def update_streak(self, increment: bool = True) -> None:
        if increment:
            self.current_streak += 1
            if self.current_streak > self.longest_streak:
                self.longest_streak = self.current_streak
        else:
            self.current_streak = 0

    def earn_badge(self, badge_id: str) -> bool:
        """Add a badge once. Returns True when it was not held before."""
        if badge_id in self.badges_earned:
            return False
        self.badges_earned.append(badge_id)
        return True

    def touch(self, now: datetime) -> None:
        if now > self.last_active:
            self.last_active = now

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "avatar": self.avatar,
            "color_theme": self.color_theme,
            "total_points": self.total_points,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "tasks_completed": self.tasks_completed,
            "badges_earned": list(self.badges_earned),
            "created_at": encode_dt(self.created_at),
            "last_active": encode_dt(self.last_active),
            "is_admin": self.is_admin,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> User:
        badges: list[str] = []
        for badge_id in data.get("badges_earned", []):
            if badge_id not in badges:
                badges.append(badge_id)
        return cls(
            id=UUID(data["id"]),
            name=data["name"],
            avatar=data["avatar"],
            color_theme=data["color_theme"],
            total_points=int(data.get("total_points", 0)),
            current_streak=int(data.get("current_streak", 0)),
            longest_streak=int(data.get("longest_streak", 0)),
            tasks_completed=int(data.get("tasks_completed", 0)),
            badges_earned=badges,
            created_at=decode_dt(data["created_at"]),
            last_active=decode_dt(data["last_active"]),
            is_admin=bool(data.get("is_admin", False)),
        )


# ── Tasks ─────────────────────────────────────────────────


@dataclass
class Task:
    title: str
    category: str
    id: UUID = field(default_factory=uuid4)
    description: str = ""
    points: int = 10
    priority: Priority = Priority.MEDIUM
    frequency: Frequency = Frequency.DAILY
    is_completed: bool = False
    completed_by: UUID | None = None
    completed_at: datetime | None = None
    claimed_by: UUID | None = None
    claimed_at: datetime | None = None
    due_date: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_claimed(self) -> bool:
        return self.claimed_by is not None

    @property
    def is_available(self) -> bool:
        return not self.is_completed and not self.is_claimed

    def claim(self, user_id: UUID, now: datetime) -> None:
        self.claimed_by = user_id
        self.claimed_at = now

    def unclaim(self) -> None:
        self.claimed_by = None
        self.claimed_at = None

    def complete(self, user_id: UUID, now: datetime) -> None:
        self.is_completed = True
        self.completed_by = user_id
        self.completed_at = now

    def reset(self) -> None:
        """Return the task to the available state."""
        self.is_completed = False
        self.completed_by = None
        self.completed_at = None
        self.unclaim()

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "points": self.points,
            "category": self.category,
            "priority": self.priority.value,
            "frequency": self.frequency.value,
            "is_completed": self.is_completed,
            "completed_by": encode_id(self.completed_by),
            "completed_at": encode_dt(self.completed_at),
            "claimed_by": encode_id(self.claimed_by),
            "claimed_at": encode_dt(self.claimed_at),
            "due_date": encode_dt(self.due_date),
            "created_at": encode_dt(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> Task:
        return cls(
            id=UUID(data["id"]),
            title=data["title"],
            description=data.get("description", ""),
            points=int(data["points"]),
            category=data["category"],
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            frequency=Frequency(data.get("frequency", Frequency.DAILY.value)),
            is_completed=bool(data.get("is_completed", False)),
            completed_by=decode_id(data.get("completed_by")),
            completed_at=decode_dt(data.get("completed_at")),
            claimed_by=decode_id(data.get("claimed_by")),
            claimed_at=decode_dt(data.get("claimed_at")),
            due_date=decode_dt(data.get("due_date")),
            created_at=decode_dt(data["created_at"]),
        )


# ── Categories ────────────────────────────────────────────


@dataclass
class Category:
    """A chore area. Owns its tasks by id; the task objects live in the engine's store."""

    name: str
    icon: str
    color: str
    id: UUID = field(default_factory=uuid4)
    task_ids: list[UUID] = field(default_factory=list)

    def tasks(self, store: Mapping[UUID, Task]) -> list[Task]:
        return [store[task_id] for task_id in self.task_ids if task_id in store]

    def completed_count(self, store: Mapping[UUID, Task]) -> int:
        return sum(1 for t in self.tasks(store) if t.is_completed)

    @property
    def total_count(self) -> int:
        return len(self.task_ids)

    def completion_percentage(self, store: Mapping[UUID, Task]) -> float:
        if not self.task_ids:
            return 0.0
        return self.completed_count(store) / self.total_count

    def to_dict(self, store: Mapping[UUID, Task]) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "tasks": [t.to_dict() for t in self.tasks(store)],
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> tuple[Category, list[Task]]:
        tasks = [Task.from_dict(t) for t in data.get("tasks", [])]
        category = cls(
            id=UUID(data["id"]),
            name=data["name"],
            icon=data["icon"],
            color=data["color"],
            task_ids=[t.id for t in tasks],
        )
        return category, tasks


# ── Derived views ─────────────────────────────────────────


RANK_EMOJI = {1: "🥇", 2: "🥈", 3: "🥉"}


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: UUID
    user_name: str
    user_avatar: str
    user_color: str
    rank: int
    points: int
    tasks_completed: int
    streak: int
    badge_count: int

    @classmethod
    def from_user(cls, user: User, rank: int) -> LeaderboardEntry:
        return cls(
            user_id=user.id,
            user_name=user.name,
            user_avatar=user.avatar,
            user_color=user.color_theme,
            rank=rank,
            points=user.total_points,
            tasks_completed=user.tasks_completed,
            streak=user.current_streak,
            badge_count=len(user.badges_earned),
        )

    @property
    def rank_emoji(self) -> str:
        return RANK_EMOJI.get(self.rank, "🏅")

    def to_dict(self) -> dict:
        return {
            "user_id": str(self.user_id),
            "user_name": self.user_name,
            "user_avatar": self.user_avatar,
            "user_color": self.user_color,
            "rank": self.rank,
            "rank_emoji": self.rank_emoji,
            "points": self.points,
            "tasks_completed": self.tasks_completed,
            "streak": self.streak,
            "badge_count": self.badge_count,
        }


@dataclass
class UserStats:
    user: User
    category_breakdown: dict[str, int]
    recent_tasks: list[Task]

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "level": self.user.level,
            "progress_to_next_level": self.user.progress_to_next_level,
            "category_breakdown": dict(self.category_breakdown),
            "recent_tasks": [t.to_dict() for t in self.recent_tasks],
        }