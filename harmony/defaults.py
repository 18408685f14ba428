"""First-run household: sample members and chore categories."""

from __future__ import annotations

from datetime import datetime

from .models import Category, Task, User, utcnow

SAMPLE_USERS: tuple[dict, ...] = (
    {
        "name": "Alex", "avatar": "Alex", "color_theme": "#FF6B6B",
        "total_points": 450, "current_streak": 7, "longest_streak": 12, "tasks_completed": 45,
        "badges_earned": ["first_task", "streak_7", "points_100"],
        "is_admin": True,
    },
    {
        "name": "Sarah", "avatar": "Sarah", "color_theme": "#4ECDC4",
        "total_points": 680, "current_streak": 14, "longest_streak": 14, "tasks_completed": 68,
        "badges_earned": ["first_task", "streak_7", "streak_14", "points_100", "points_500"],
        "is_admin": True,
    },
    {
        "name": "Mike", "avatar": "Mike", "color_theme": "#FFD93D",
        "total_points": 320, "current_streak": 3, "longest_streak": 9, "tasks_completed": 32,
        "badges_earned": ["first_task", "points_100"],
    },
    {
        "name": "Emma", "avatar": "Emma", "color_theme": "#A8E6CF",
        "total_points": 890, "current_streak": 21, "longest_streak": 21, "tasks_completed": 89,
        "badges_earned": ["first_task", "streak_7", "streak_14", "streak_21", "points_100", "points_500"],
    },
)

# (name, icon, color, ((task title, points), ...))
SAMPLE_CATEGORIES: tuple[tuple[str, str, str, tuple[tuple[str, int], ...]], ...] = (
    ("Kitchen", "fork.knife", "#FF6B6B", (
        ("Wash dishes", 15),
        ("Clean countertops", 10),
        ("Empty trash", 5),
        ("Organize fridge", 20),
        ("Sweep floor", 10),
        ("Clean stove", 15),
    )),
    ("Bathroom", "shower.fill", "#4ECDC4", (
        ("Clean toilet", 20),
        ("Clean shower", 20),
        ("Clean sink", 10),
        ("Restock supplies", 5),
        ("Mop floor", 15),
    )),
    ("Living Room", "sofa.fill", "#FFD93D", (
        ("Vacuum carpet", 15),
        ("Dust surfaces", 10),
        ("Organize cushions", 5),
        ("Clean windows", 20),
        ("Water plants", 5),
    )),
    ("Bedroom", "bed.double.fill", "#A8E6CF", (
        ("Make bed", 5),
        ("Change sheets", 15),
        ("Organize closet", 20),
        ("Vacuum floor", 10),
        ("Dust furniture", 10),
    )),
    ("Laundry", "washer.fill", "#95E1D3", (
        ("Wash clothes", 15),
        ("Dry clothes", 10),
        ("Fold laundry", 15),
        ("Iron clothes", 20),
        ("Put away clothes", 10),
    )),
    ("Outdoor", "leaf.fill", "#F38181", (
        ("Mow lawn", 30),
        ("Water garden", 10),
        ("Take out bins", 5),
        ("Clean patio", 15),
        ("Trim bushes", 25),
    )),
)


def sample_users(now: datetime | None = None) -> list[User]:
    now = now or utcnow()
    return [
        User(**{**data, "badges_earned": list(data["badges_earned"])}, created_at=now, last_active=now)
        for data in SAMPLE_USERS
    ]


def sample_categories(now: datetime | None = None) -> list[tuple[Category, list[Task]]]:
    """Fresh categories with their tasks. New ids on every call."""
    now = now or utcnow()
    result = []
    for name, icon, color, task_defs in SAMPLE_CATEGORIES:
        tasks = [Task(title=title, points=points, category=name, created_at=now) for title, points in task_defs]
        category = Category(name=name, icon=icon, color=color, task_ids=[t.id for t in tasks])
        result.append((category, tasks))
    return result
