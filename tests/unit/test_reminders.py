"""Unit tests for Reminder Scheduler (north_gamification/gamification/reminders.py)"""
import pytest
from datetime import timedelta

from north_gamification.exceptions import EntityNotFoundError
from north_gamification.gamification.reminders import (
    REMINDER_DELAYS,
    ReminderScheduler,
    generate_recovery_message,
)
from north_gamification.models import (
    ReminderType,
    StreakRecovery,
    StreakRiskLevel,
    StreakType,
)


@pytest.fixture
def scheduler(store, reminder_sink, clock, id_factory):
    return ReminderScheduler(store, reminder_sink, clock=clock, id_factory=id_factory)


# ============================================================================
# Scheduling Tests
# ============================================================================

@pytest.mark.parametrize("risk,reminder_type,delay", [
    (StreakRiskLevel.LOW_RISK, ReminderType.GENTLE_NUDGE, timedelta(hours=2)),
    (StreakRiskLevel.MEDIUM_RISK, ReminderType.MOTIVATION_BOOST, timedelta(hours=1)),
    (StreakRiskLevel.HIGH_RISK, ReminderType.STREAK_RISK_ALERT, timedelta(minutes=30)),
])
@pytest.mark.asyncio
async def test_schedule_for_risk(scheduler, store, make_streak, test_user_id, clock, risk, reminder_type, delay):
    """Test the reminder type and delay follow the risk level"""
    streak = make_streak(current_count=4, risk_level=risk)

    reminder = await scheduler.schedule_for_risk(test_user_id, streak)

    assert reminder.reminder_type == reminder_type
    assert reminder.scheduled_for == clock() + delay
    assert reminder.streak_id == streak.id
    assert reminder.is_read is False
    assert await store.get_reminder(test_user_id, reminder.id) == reminder


@pytest.mark.asyncio
async def test_schedule_for_safe_streak(scheduler, store, make_streak, test_user_id):
    """Test safe streaks get no reminder"""
    assert await scheduler.schedule_for_risk(test_user_id, make_streak()) is None
    assert await store.get_reminders(test_user_id) == []


@pytest.mark.asyncio
async def test_schedule_streak_reminder(scheduler, store, make_streak, test_user_id, days_ago, clock):
    """Test explicit reminders use the requested type and current risk copy"""
    await store.save_streak(test_user_id, make_streak(current_count=9, last_activity_date=days_ago(4)))

    reminder = await scheduler.schedule_streak_reminder(
        test_user_id, "streak-1", ReminderType.GENTLE_NUDGE
    )

    assert reminder.reminder_type == ReminderType.GENTLE_NUDGE
    assert reminder.scheduled_for == clock() + REMINDER_DELAYS[ReminderType.GENTLE_NUDGE]
    assert "needs attention" in reminder.message


@pytest.mark.asyncio
async def test_schedule_streak_reminder_unknown_streak(scheduler, test_user_id):
    """Test scheduling for a missing streak fails"""
    with pytest.raises(EntityNotFoundError):
        await scheduler.schedule_streak_reminder(test_user_id, "nope", ReminderType.GENTLE_NUDGE)


@pytest.mark.asyncio
async def test_schedule_recovery_reminders(scheduler, test_user_id, clock):
    """Test recovery support reminders at +4h, +1d and +2d"""
    recovery = StreakRecovery(
        id="rec-1",
        user_id=test_user_id,
        original_streak_id="streak-1",
        streak_type=StreakType.GOAL_PROGRESS,
        broken_at=clock(),
        recovery_started=clock(),
        original_count=5,
    )

    reminders = await scheduler.schedule_recovery_reminders(test_user_id, recovery)

    assert [r.scheduled_for - clock() for r in reminders] == [
        timedelta(hours=4), timedelta(days=1), timedelta(days=2)
    ]
    assert all(r.reminder_type == ReminderType.RECOVERY_SUPPORT for r in reminders)
    assert reminders[2].message == "Recovery step 3: Final push! Complete your goal progress recovery today"


def test_generate_recovery_message_fallback():
    """Test steps past the plan get the generic copy"""
    assert generate_recovery_message(StreakType.DAILY_SAVINGS, 5) == (
        "Continue your daily savings recovery journey"
    )


# ============================================================================
# Listing & Acknowledgement Tests
# ============================================================================

@pytest.mark.asyncio
async def test_active_reminders_sorted_and_unread(scheduler, make_streak, test_user_id):
    """Test active reminders exclude read ones and come soonest first"""
    gentle = await scheduler.schedule_for_risk(
        test_user_id, make_streak(risk_level=StreakRiskLevel.LOW_RISK)
    )
    alert = await scheduler.schedule_for_risk(
        test_user_id, make_streak(risk_level=StreakRiskLevel.HIGH_RISK)
    )
    boost = await scheduler.schedule_for_risk(
        test_user_id, make_streak(risk_level=StreakRiskLevel.MEDIUM_RISK)
    )
    await scheduler.acknowledge(test_user_id, boost.id)

    active = await scheduler.get_active_reminders(test_user_id)

    assert [r.id for r in active] == [alert.id, gentle.id]


@pytest.mark.asyncio
async def test_acknowledge_unknown_reminder(scheduler, test_user_id):
    """Test acknowledging a missing reminder fails"""
    with pytest.raises(EntityNotFoundError):
        await scheduler.acknowledge(test_user_id, "nope")


# ============================================================================
# Delivery Queue Tests
# ============================================================================

@pytest.mark.asyncio
async def test_flush_submits_to_sink(scheduler, reminder_sink, make_streak, test_user_id):
    """Test queued reminders reach the sink only when flushed"""
    reminder = await scheduler.schedule_for_risk(
        test_user_id, make_streak(risk_level=StreakRiskLevel.LOW_RISK)
    )
    assert reminder_sink.reminders == []

    assert await scheduler.flush(test_user_id) == 1
    assert reminder_sink.reminders == [reminder]
    assert await scheduler.flush(test_user_id) == 0


@pytest.mark.asyncio
async def test_discard_drops_queue(scheduler, reminder_sink, make_streak, test_user_id):
    """Test discarded reminders are never submitted"""
    await scheduler.schedule_for_risk(test_user_id, make_streak(risk_level=StreakRiskLevel.LOW_RISK))

    scheduler.discard(test_user_id)

    assert await scheduler.flush(test_user_id) == 0
    assert reminder_sink.reminders == []


@pytest.mark.asyncio
async def test_flush_without_sink(store, make_streak, test_user_id, clock, id_factory):
    """Test a scheduler without a sink still persists and clears its queue"""
    scheduler = ReminderScheduler(store, clock=clock, id_factory=id_factory)
    await scheduler.schedule_for_risk(test_user_id, make_streak(risk_level=StreakRiskLevel.LOW_RISK))

    assert await scheduler.flush(test_user_id) == 0
    assert len(await store.get_reminders(test_user_id)) == 1
