"""Badge catalog and the automatic unlock rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import User


class BadgeType(str, Enum):
    MILESTONE = "milestone"
    STREAK = "streak"
    CATEGORY = "category"
    SPECIAL = "special"


@dataclass(frozen=True)
class BadgeDef:
    id: str
    name: str
    description: str
    icon: str
    type: BadgeType
    requirement: int
    color: str

    def to_dict(self, unlocked: bool | None = None) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "type": self.type.value,
            "requirement": self.requirement,
            "color": self.color,
        }
        if unlocked is not None:
            data["unlocked"] = unlocked
        return data


ALL_BADGES: tuple[BadgeDef, ...] = (
    # Task count
    BadgeDef("first_task", "First Steps", "Complete your first task", "star.fill", BadgeType.MILESTONE, 1, "#FFD700"),
    BadgeDef("tasks_10", "Getting Started", "Complete 10 tasks", "10.circle.fill", BadgeType.MILESTONE, 10, "#FF6B6B"),
    BadgeDef("tasks_25", "Helper", "Complete 25 tasks", "25.circle.fill", BadgeType.MILESTONE, 25, "#FF6B6B"),
    BadgeDef("tasks_50", "Hard Worker", "Complete 50 tasks", "50.circle.fill", BadgeType.MILESTONE, 50, "#FF6B6B"),
    BadgeDef("tasks_100", "Chore Champion", "Complete 100 tasks", "crown.fill", BadgeType.MILESTONE, 100, "#FFD700"),
    # Streaks
    BadgeDef("streak_3", "3-Day Streak", "Complete tasks for 3 days in a row", "flame.fill", BadgeType.STREAK, 3, "#FF8C42"),
    BadgeDef("streak_7", "Week Warrior", "Complete tasks for 7 days in a row", "flame.fill", BadgeType.STREAK, 7, "#FF6B35"),
    BadgeDef("streak_14", "Fortnight Force", "Complete tasks for 14 days in a row", "flame.fill", BadgeType.STREAK, 14, "#FF5722"),
    BadgeDef("streak_21", "Habit Builder", "Complete tasks for 21 days in a row", "flame.fill", BadgeType.STREAK, 21, "#FF4500"),
    BadgeDef("streak_30", "Monthly Master", "Complete tasks for 30 days in a row", "flame.fill", BadgeType.STREAK, 30, "#DC143C"),
    # Points
    BadgeDef("points_100", "Century Club", "Earn 100 points", "dollarsign.circle.fill", BadgeType.MILESTONE, 100, "#4ECDC4"),
    BadgeDef("points_500", "Point Collector", "Earn 500 points", "dollarsign.circle.fill", BadgeType.MILESTONE, 500, "#4ECDC4"),
    BadgeDef("points_1000", "Point Master", "Earn 1000 points", "dollarsign.circle.fill", BadgeType.MILESTONE, 1000, "#FFD700"),
    # Category (display only, not evaluated yet)
    BadgeDef("kitchen_master", "Kitchen Master", "Complete 20 kitchen tasks", "fork.knife.circle.fill", BadgeType.CATEGORY, 20, "#FF6B6B"),
    BadgeDef("clean_freak", "Clean Freak", "Complete 20 bathroom tasks", "sparkles", BadgeType.CATEGORY, 20, "#4ECDC4"),
    # Special (display only, not evaluated yet)
    BadgeDef("early_bird", "Early Bird", "Complete a task before 8 AM", "sunrise.fill", BadgeType.SPECIAL, 1, "#FFD93D"),
    BadgeDef("night_owl", "Night Owl", "Complete a task after 10 PM", "moon.stars.fill", BadgeType.SPECIAL, 1, "#9D84B7"),
    BadgeDef("team_player", "Team Player", "Help complete tasks claimed by others", "person.3.fill", BadgeType.SPECIAL, 5, "#A8E6CF"),
)

BADGES_BY_ID: dict[str, BadgeDef] = {b.id: b for b in ALL_BADGES}

# (badge_id, User counter) pairs checked after every completion.
# Thresholds come from the catalog entry's requirement.
AUTO_RULES: tuple[tuple[str, str], ...] = (
    ("first_task", "tasks_completed"),
    ("tasks_10", "tasks_completed"),
    ("tasks_25", "tasks_completed"),
    ("tasks_50", "tasks_completed"),
    ("tasks_100", "tasks_completed"),
    ("streak_3", "current_streak"),
    ("streak_7", "current_streak"),
    ("streak_14", "current_streak"),
    ("streak_21", "current_streak"),
    ("streak_30", "current_streak"),
    ("points_100", "total_points"),
    ("points_500", "total_points"),
    ("points_1000", "total_points"),
)


def evaluate_badges(user: User) -> list[str]:
    """Award every qualifying badge the user does not hold yet. Returns the new ids."""
    earned = []
    for badge_id, counter in AUTO_RULES:
        if getattr(user, counter) >= BADGES_BY_ID[badge_id].requirement and user.earn_badge(badge_id):
            earned.append(badge_id)
    return earned


def badges_for_user(user: User) -> list[tuple[BadgeDef, bool]]:
    held = set(user.badges_earned)
    return [(badge, badge.id in held) for badge in ALL_BADGES]
