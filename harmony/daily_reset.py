"""Once-per-day reset of recurring chores."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from .models import Frequency, Task


def is_reset_due(last_reset: date | None, today: date) -> bool:
    return last_reset is None or today > last_reset


def reset_recurring_tasks(tasks: Iterable[Task]) -> int:
    """Clear completion and claim state on daily tasks. Returns how many were touched."""
    count = 0
    for t in tasks:
        if t.frequency is Frequency.DAILY:
            t.reset()
            count += 1
    return count
