"""Unit tests for Streak System (north_gamification/gamification/streak_system.py)"""
import pytest
from datetime import timedelta

from north_gamification.gamification.recovery import RecoveryWorkflow
from north_gamification.gamification.reminders import ReminderScheduler
from north_gamification.gamification.streak_system import (
    CELEBRATION_MILESTONES,
    StreakEngine,
    calculate_urgency_score,
    classify_risk,
    generate_reminder_message,
    is_milestone,
)
from north_gamification.models import (
    CelebrationIntensity,
    RecoveryStatus,
    ReminderType,
    StreakRecovery,
    StreakRiskLevel,
    StreakType,
)


@pytest.fixture
def reminders(store, clock, id_factory):
    return ReminderScheduler(store, clock=clock, id_factory=id_factory)


@pytest.fixture
def recovery(store, reminders, clock, id_factory):
    return RecoveryWorkflow(store, reminders, window_days=3, clock=clock, id_factory=id_factory)


@pytest.fixture
def streaks(store, reminders, recovery, clock, id_factory):
    return StreakEngine(
        store,
        reminders=reminders,
        recovery=recovery,
        auto_start_recovery=True,
        clock=clock,
        id_factory=id_factory,
    )


# ============================================================================
# Risk Classification Tests
# ============================================================================

@pytest.mark.parametrize("days,expected", [
    (-2, StreakRiskLevel.SAFE),
    (0, StreakRiskLevel.SAFE),
    (1, StreakRiskLevel.SAFE),
    (2, StreakRiskLevel.LOW_RISK),
    (3, StreakRiskLevel.MEDIUM_RISK),
    (4, StreakRiskLevel.HIGH_RISK),
    (30, StreakRiskLevel.HIGH_RISK),
])
def test_classify_risk(today, days, expected):
    """Test risk tiers by days since last activity"""
    assert classify_risk(today - timedelta(days=days), today) == expected


@pytest.mark.parametrize("risk,count,expected", [
    (StreakRiskLevel.SAFE, 1, 1),
    (StreakRiskLevel.LOW_RISK, 1, 3),
    (StreakRiskLevel.LOW_RISK, 7, 4),
    (StreakRiskLevel.LOW_RISK, 30, 6),
    (StreakRiskLevel.MEDIUM_RISK, 7, 9),
    (StreakRiskLevel.MEDIUM_RISK, 30, 10),
    (StreakRiskLevel.HIGH_RISK, 1, 9),
    (StreakRiskLevel.HIGH_RISK, 7, 10),
    (StreakRiskLevel.BROKEN, 1, 10),
])
def test_calculate_urgency_score(risk, count, expected):
    """Test base score by risk times length multiplier, clamped to [1, 10]"""
    assert calculate_urgency_score(risk, count) == expected


def test_milestones():
    """Test the celebrated milestone set"""
    assert CELEBRATION_MILESTONES == (3, 7, 14, 21, 30, 60, 90, 180, 365)
    assert is_milestone(7)
    assert not is_milestone(8)


def test_reminder_message_mentions_streak(make_streak):
    """Test reminder copy includes the count and display name"""
    streak = make_streak(StreakType.SAVINGS_CONTRIBUTION, current_count=12)

    message = generate_reminder_message(streak, StreakRiskLevel.HIGH_RISK)

    assert "12-day savings streak needs attention" in message


# ============================================================================
# Streak Transition Tests
# ============================================================================

@pytest.mark.asyncio
async def test_update_streak_first_activity(streaks, store, test_user_id):
    """Test first activity creates streak of 1"""
    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN)

    assert result.streak.current_count == 1
    assert result.streak.best_count == 1
    assert result.was_extended is True
    assert result.was_broken is False
    assert result.new_risk_level == StreakRiskLevel.SAFE
    assert await store.get_streak(test_user_id, StreakType.DAILY_CHECK_IN) == result.streak


@pytest.mark.asyncio
async def test_update_streak_same_day_no_change(streaks, test_user_id, today):
    """Test activity on same day doesn't increment streak again"""
    first = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)
    second = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)
    third = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert first.streak.current_count == 1
    assert second.streak.current_count == 1
    assert third.streak.current_count == 1
    assert second.was_extended is False
    assert second.celebration_event is None


@pytest.mark.asyncio
async def test_update_streak_consecutive_day(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test consecutive day activity increments streak, best unchanged"""
    await store.save_streak(test_user_id, make_streak(
        current_count=5, best_count=10, last_activity_date=days_ago(1)
    ))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert result.streak.current_count == 6
    assert result.streak.best_count == 10
    assert result.was_extended is True


@pytest.mark.asyncio
async def test_update_streak_consecutive_day_new_best(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test best count follows current count once exceeded"""
    await store.save_streak(test_user_id, make_streak(
        current_count=10, best_count=10, last_activity_date=days_ago(1), recovery_attempts=2
    ))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert result.streak.current_count == 11
    assert result.streak.best_count == 11
    assert result.streak.recovery_attempts == 0


@pytest.mark.asyncio
async def test_update_streak_gap_resets(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test gap of more than 1 day resets streak"""
    await store.save_streak(test_user_id, make_streak(
        current_count=8, best_count=12, last_activity_date=days_ago(3)
    ))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert result.was_broken is True
    assert result.was_extended is False
    assert result.streak.current_count == 1
    assert result.streak.best_count == 12
    assert result.streak.recovery_attempts == 1
    assert result.streak.last_activity_date == today
    assert result.new_risk_level == StreakRiskLevel.SAFE


@pytest.mark.asyncio
async def test_update_streak_out_of_order_is_noop(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test activity dated before the last activity changes nothing"""
    await store.save_streak(test_user_id, make_streak(current_count=4, last_activity_date=today))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, days_ago(2))

    assert result.streak.current_count == 4
    assert result.streak.last_activity_date == today
    assert result.was_broken is False


# ============================================================================
# Milestone Tests
# ============================================================================

@pytest.mark.asyncio
async def test_milestone_new_record(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test reaching 7 days over a best of 6 celebrates a new record"""
    await store.save_streak(test_user_id, make_streak(current_count=6, last_activity_date=days_ago(1)))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert result.streak.current_count == 7
    event = result.celebration_event
    assert event is not None
    assert event.title == "New Record!"
    assert event.intensity == CelebrationIntensity.MEDIUM
    assert event.additional_data["is_new_record"] is True


@pytest.mark.asyncio
async def test_milestone_not_a_record(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test reaching 7 days under an older best of 20 is not a record"""
    await store.save_streak(test_user_id, make_streak(
        current_count=6, best_count=20, last_activity_date=days_ago(1)
    ))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert result.celebration_event.title == "Streak Continues!"
    assert result.celebration_event.additional_data["is_new_record"] is False
    assert result.previous_best_count == 20


@pytest.mark.asyncio
async def test_no_celebration_between_milestones(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test non-milestone counts are not celebrated"""
    await store.save_streak(test_user_id, make_streak(current_count=4, last_activity_date=days_ago(1)))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert result.streak.current_count == 5
    assert result.celebration_event is None


# ============================================================================
# Risk, Reminder & Recovery Side Effects
# ============================================================================

@pytest.mark.asyncio
async def test_backdated_activity_classified_against_today(streaks, store, test_user_id, days_ago):
    """Test risk uses the clock's today, not the activity date"""
    result = await streaks.update(test_user_id, StreakType.GOAL_PROGRESS, days_ago(3))

    assert result.new_risk_level == StreakRiskLevel.MEDIUM_RISK
    assert result.reminder_scheduled is not None
    assert result.reminder_scheduled.reminder_type == ReminderType.MOTIVATION_BOOST
    assert result.streak.last_reminder_sent is not None
    assert len(await store.get_reminders(test_user_id)) == 1


@pytest.mark.asyncio
async def test_safe_update_schedules_no_reminder(streaks, store, test_user_id):
    """Test safe streaks get no reminder"""
    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN)

    assert result.reminder_scheduled is None
    assert await store.get_reminders(test_user_id) == []


@pytest.mark.asyncio
async def test_broken_streak_starts_recovery(streaks, store, make_streak, test_user_id, days_ago, today):
    """Test a broken streak opens a recovery snapshotting the best count"""
    await store.save_streak(test_user_id, make_streak(
        current_count=9, best_count=15, last_activity_date=days_ago(5)
    ))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    recovery = result.recovery_started
    assert recovery is not None
    assert recovery.original_streak_id == "streak-1"
    assert recovery.original_count == 15
    assert recovery.status == RecoveryStatus.INITIATED
    assert len(await store.get_recoveries(test_user_id)) == 1


@pytest.mark.asyncio
async def test_broken_streak_without_auto_recovery(store, recovery, make_streak, clock, id_factory, test_user_id, days_ago, today):
    """Test recovery is not started when auto start is off"""
    streaks = StreakEngine(
        store, recovery=recovery, auto_start_recovery=False, clock=clock, id_factory=id_factory
    )
    await store.save_streak(test_user_id, make_streak(current_count=3, last_activity_date=days_ago(4)))

    result = await streaks.update(test_user_id, StreakType.DAILY_CHECK_IN, today)

    assert result.was_broken is True
    assert result.recovery_started is None
    assert await store.get_recoveries(test_user_id) == []


# ============================================================================
# Read & Analysis Tests
# ============================================================================

@pytest.mark.asyncio
async def test_get_streaks_recomputes_risk(streaks, store, make_streak, test_user_id, days_ago, clock):
    """Test stored risk is never served stale across a day boundary"""
    await store.save_streak(test_user_id, make_streak(last_activity_date=days_ago(0)))
    clock.advance(days=2)

    [streak] = await streaks.get_streaks(test_user_id)

    assert streak.risk_level == StreakRiskLevel.LOW_RISK


@pytest.mark.asyncio
async def test_analyze_streak_risks_sorted_by_urgency(streaks, store, make_streak, test_user_id, days_ago):
    """Test analyses cover active streaks, most urgent first"""
    await store.save_streak(test_user_id, make_streak(
        StreakType.DAILY_CHECK_IN, current_count=3, last_activity_date=days_ago(0), streak_id="safe"
    ))
    await store.save_streak(test_user_id, make_streak(
        StreakType.SAVINGS_CONTRIBUTION, current_count=10, last_activity_date=days_ago(5), streak_id="high"
    ))
    await store.save_streak(test_user_id, make_streak(
        StreakType.GOAL_PROGRESS, current_count=2, last_activity_date=days_ago(2), streak_id="low"
    ))
    await store.save_streak(test_user_id, make_streak(
        StreakType.UNDER_BUDGET, last_activity_date=days_ago(9), streak_id="inactive", is_active=False
    ))

    analyses = await streaks.analyze_streak_risks(test_user_id)

    assert [a.streak.id for a in analyses] == ["high", "low", "safe"]
    high = analyses[0]
    assert high.risk_level == StreakRiskLevel.HIGH_RISK
    assert high.days_since_last_activity == 5
    assert high.urgency_score == 10
    assert "Make a small savings contribution" in high.recommended_actions
    assert "10-day savings streak" in high.reminder_message


@pytest.mark.asyncio
async def test_analyze_streak_risks_no_streaks(streaks, test_user_id):
    """Test users without streaks get an empty analysis"""
    assert await streaks.analyze_streak_risks(test_user_id) == []


@pytest.mark.asyncio
async def test_streak_statistics(streaks, store, make_streak, test_user_id, days_ago, clock):
    """Test aggregate streak statistics"""
    await store.save_streak(test_user_id, make_streak(
        StreakType.DAILY_CHECK_IN, current_count=7, last_activity_date=days_ago(0), streak_id="daily"
    ))
    await store.save_streak(test_user_id, make_streak(
        StreakType.SAVINGS_CONTRIBUTION, current_count=2, best_count=30,
        last_activity_date=days_ago(2), streak_id="savings"
    ))
    await store.save_streak(test_user_id, make_streak(
        StreakType.GOAL_PROGRESS, last_activity_date=days_ago(10), streak_id="goal", is_active=False
    ))
    for recovery_id, status in (("r1", RecoveryStatus.COMPLETED), ("r2", RecoveryStatus.ABANDONED)):
        await store.save_recovery(test_user_id, StreakRecovery(
            id=recovery_id,
            user_id=test_user_id,
            original_streak_id="savings",
            streak_type=StreakType.SAVINGS_CONTRIBUTION,
            broken_at=clock(),
            recovery_started=clock(),
            original_count=30,
            status=status,
            is_successful=status == RecoveryStatus.COMPLETED,
        ))

    stats = await streaks.get_streak_statistics(test_user_id)

    assert stats.total_active_streaks == 2
    assert stats.longest_current_streak.id == "daily"
    assert stats.longest_ever_streak.id == "savings"
    assert stats.total_streak_days == 38
    assert stats.average_streak_length == pytest.approx(38 / 3)
    assert set(stats.streaks_by_type) == {StreakType.DAILY_CHECK_IN, StreakType.SAVINGS_CONTRIBUTION}
    assert stats.risk_distribution == {StreakRiskLevel.SAFE: 1, StreakRiskLevel.LOW_RISK: 1}
    assert stats.recovery_success_rate == 0.5
    assert stats.weekly_streak_trend == [1, 0, 1, 0, 0, 0, 0]
    assert [m.count for m in stats.monthly_milestones] == [7, 30]


@pytest.mark.asyncio
async def test_streak_statistics_empty(streaks, test_user_id):
    """Test statistics for a user with no streaks"""
    stats = await streaks.get_streak_statistics(test_user_id)

    assert stats.total_active_streaks == 0
    assert stats.longest_current_streak is None
    assert stats.average_streak_length == 0.0
    assert stats.recovery_success_rate == 0.0
    assert stats.weekly_streak_trend == [0] * 7
