"""Shared fixtures: a temporary SQLite store, a controllable clock and engines built on them."""
import random
from datetime import datetime, timedelta, timezone

import pytest

from harmony.database import Storage
from harmony.engine import GamificationEngine
from harmony.models import Category, Frequency, Task, User
from harmony.session import SessionManager


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ============================================================================
# Infrastructure
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
async def storage(tmp_path):
    store = Storage(tmp_path / "harmony-test.db")
    await store.init_db()
    yield store
    await store.close()


@pytest.fixture
async def engine(storage, clock):
    """Empty household (no sample seeding)."""
    eng = GamificationEngine(storage, clock=clock, timezone="UTC", seed_samples=False)
    await eng.load()
    return eng


@pytest.fixture
async def seeded_engine(storage, clock):
    eng = GamificationEngine(storage, clock=clock, timezone="UTC", seed_samples=True)
    await eng.load()
    return eng


@pytest.fixture
async def sessions(storage, clock):
    manager = SessionManager(storage, clock=clock, rng=random.Random(42))
    await manager.load()
    return manager


# ============================================================================
# Household builders
# ============================================================================

@pytest.fixture
async def kitchen(engine):
    """A Kitchen category with one daily and one weekly chore."""
    category = await engine.add_category("Kitchen", "fork.knife", "#FF6B6B")
    await engine.add_task(category.id, "Wash dishes", points=15)
    await engine.add_task(category.id, "Clean oven", points=30, frequency=Frequency.WEEKLY)
    return category


@pytest.fixture
async def member(engine):
    return await engine.create_user("Robin", "Robin", "#FF6B6B")


def first_task(engine: GamificationEngine, category: Category) -> Task:
    return engine.category_tasks(category.id)[0]


def make_user(**overrides) -> User:
    fields = {"name": "Sam", "avatar": "Sam", "color_theme": "#4ECDC4"}
    fields.update(overrides)
    return User(**fields)
