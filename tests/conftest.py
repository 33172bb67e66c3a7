"""Global test fixtures and utilities for gamification engine tests"""
import pytest
from datetime import date, datetime, timedelta, timezone
from itertools import count

from north_gamification.gamification import (
    CollectingCelebrationSink,
    CollectingReminderSink,
    GamificationEngine,
    InMemoryGamificationStore,
)
from north_gamification.models import Streak, StreakType
from north_gamification.utils.datetime_helpers import ManualClock


# ============================================================================
# Time & Id Fixtures
# ============================================================================

@pytest.fixture
def start_time():
    """Fixed starting instant for every test"""
    return datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(start_time):
    """Clock that only moves when a test advances it"""
    return ManualClock(start_time)


@pytest.fixture
def today(clock):
    return clock.today()


@pytest.fixture
def id_factory():
    """Deterministic ids: id-1, id-2, ..."""
    counter = count(1)
    return lambda: f"id-{next(counter)}"


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123456789"


# ============================================================================
# Store, Sink & Engine Fixtures
# ============================================================================

@pytest.fixture
def store():
    return InMemoryGamificationStore()


@pytest.fixture
def reminder_sink():
    return CollectingReminderSink()


@pytest.fixture
def celebration_sink():
    return CollectingCelebrationSink()


@pytest.fixture
def engine(store, reminder_sink, celebration_sink, clock, id_factory):
    """Engine wired to the in-memory store and collecting sinks"""
    return GamificationEngine(
        store,
        reminder_sink=reminder_sink,
        celebration_sink=celebration_sink,
        clock=clock,
        id_factory=id_factory,
        recovery_window_days=3,
        auto_start_recovery=True,
    )


# ============================================================================
# Factories
# ============================================================================

def _make_streak(
    streak_type: StreakType = StreakType.DAILY_CHECK_IN,
    current_count: int = 1,
    best_count: int = None,
    last_activity_date: date = None,
    streak_id: str = "streak-1",
    **overrides,
) -> Streak:
    """Build a Streak with sensible defaults"""
    return Streak(
        id=streak_id,
        type=streak_type,
        current_count=current_count,
        best_count=current_count if best_count is None else best_count,
        last_activity_date=last_activity_date or date(2024, 3, 1),
        **overrides,
    )


@pytest.fixture
def make_streak():
    """Factory for Streak records"""
    return _make_streak


@pytest.fixture
def days_ago(today):
    """Date N days before the test's today"""
    return lambda days: today - timedelta(days=days)
